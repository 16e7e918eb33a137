"""Reconciles explicit and automatic pairings into a verification plan."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import PairingGap, ResolutionConflict
from .logging import get_logger
from .models import ClassifiedSource, FileRole, PairingRequest, SourceFile, VerificationTriple
from .sources import SourceResolver


@dataclass(frozen=True)
class Plan:
    """Resolved triples plus the keyring used where none was named."""

    triples: List[VerificationTriple]
    default_keyring: Optional[SourceFile]
    automatic: bool


class PlanResolver:
    """Builds the ordered list of verification triples for one build."""

    def __init__(self, resolver: SourceResolver) -> None:
        self.resolver = resolver
        self.logger = get_logger("planner")

    def resolve(
        self,
        classified: Sequence[ClassifiedSource],
        requests: Sequence[PairingRequest],
        default_keyring: str | None = None,
    ) -> List[VerificationTriple]:
        return self.build(classified, requests, default_keyring).triples

    def build(
        self,
        classified: Sequence[ClassifiedSource],
        requests: Sequence[PairingRequest],
        default_keyring: str | None = None,
    ) -> Plan:
        keyring = self._default_keyring(classified, default_keyring)
        if keyring is not None:
            self.logger.debug("Default keyring: %s", keyring.name)

        if requests:
            triples = self._explicit_plan(classified, requests, keyring)
            return Plan(triples=triples, default_keyring=keyring, automatic=False)
        triples = self._automatic_plan(classified, keyring)
        return Plan(triples=triples, default_keyring=keyring, automatic=True)

    # ------------------------------------------------------------------
    # Internals

    def _default_keyring(
        self, classified: Sequence[ClassifiedSource], reference: str | None
    ) -> Optional[SourceFile]:
        if reference:
            keyring = self.resolver.resolve(reference)
            for entry in classified:
                if entry.source == keyring and entry.role is FileRole.SIGNATURE:
                    raise ResolutionConflict(
                        f"default keyring '{reference}': {keyring.name} is a signature, not a keyring"
                    )
            return keyring
        for entry in classified:
            if entry.role is FileRole.KEYRING:
                return entry.source
        return None

    def _explicit_plan(
        self,
        classified: Sequence[ClassifiedSource],
        requests: Sequence[PairingRequest],
        default_keyring: Optional[SourceFile],
    ) -> List[VerificationTriple]:
        triples: List[VerificationTriple] = []
        for request in requests:
            keyring = request.keyring or default_keyring
            if keyring is None:
                raise ResolutionConflict(
                    f"'{request.token}': a common key is required but none was specified or found"
                )
            self._check_distinct(request.token, request.source, request.signature, keyring)
            triples.append(_triple(request.source, request.signature, keyring))

        covered = Counter(triple.signature for triple in triples)
        for entry in classified:
            if entry.role is not FileRole.SIGNATURE:
                continue
            count = covered.get(entry.source.path, 0)
            if count == 0:
                raise PairingGap(entry.source.name, "signature is not paired by any argument")
            if count > 1:
                raise ResolutionConflict(
                    f"{entry.source.name}: signature is paired by {count} arguments"
                )
        return triples

    def _automatic_plan(
        self,
        classified: Sequence[ClassifiedSource],
        default_keyring: Optional[SourceFile],
    ) -> List[VerificationTriple]:
        signatures = [entry.source for entry in classified if entry.role is FileRole.SIGNATURE]
        if not signatures:
            return []
        if default_keyring is None:
            names = ", ".join(signature.name for signature in signatures)
            raise ResolutionConflict(f"no keyring specified and none found (signatures: {names})")

        roles = {entry.source: entry.role for entry in classified}
        triples: List[VerificationTriple] = []
        for signature in signatures:
            target = Path(signature.name).stem
            if target == signature.name:
                raise PairingGap(signature.name, "signature found with no matching source file")
            matches = self.resolver.named(target)
            if len(matches) != 1 or roles.get(matches[0]) is not FileRole.PLAIN_SOURCE:
                raise PairingGap(signature.name, "signature found with no matching source file")
            source = matches[0]
            self._check_distinct(signature.name, source, signature, default_keyring)
            triples.append(_triple(source, signature, default_keyring))
            self.logger.debug("Paired %s with %s", signature.name, source.name)
        return triples

    @staticmethod
    def _check_distinct(
        label: str, source: SourceFile, signature: SourceFile, keyring: SourceFile
    ) -> None:
        if source.path == signature.path:
            raise ResolutionConflict(f"'{label}': {source.name} cannot be its own signature")
        if source.path == keyring.path:
            raise ResolutionConflict(f"'{label}': {source.name} cannot be its own keyring")
        if signature.path == keyring.path:
            raise ResolutionConflict(
                f"'{label}': {signature.name} is used as both signature and keyring"
            )


def _triple(source: SourceFile, signature: SourceFile, keyring: SourceFile) -> VerificationTriple:
    return VerificationTriple(source=source.path, signature=signature.path, keyring=keyring.path)


__all__ = ["Plan", "PlanResolver"]
