"""Runs verification triples through GnuPG, one scoped keyring at a time."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from ..classifier import PUBLIC_KEY_MARKER, contains_marker, read_leading_lines
from ..config import ToolConfig
from ..errors import InvalidKeyringError, VerificationFailure
from ..logging import get_logger, log_subject
from ..models import VerificationTriple

_KEYRING_NAME = "keyring.gpg"
_STORE_PREFIX = "srcverify-"
_PUBLIC_KEY_TAG = 6


@dataclass
class ExecutionReport:
    """Triples that passed verification, in plan order."""

    verified: List[VerificationTriple] = field(default_factory=list)


class VerificationExecutor:
    """Dearmors each keyring into a private store and verifies one signature.

    Stores are never shared between triples and are removed even when
    verification fails. The first failure aborts the remaining plan.
    """

    def __init__(
        self,
        tools: ToolConfig | None = None,
        *,
        tmpdir: Path | None = None,
        sniff_lines: int = 10,
        runner: Callable[..., str] | None = None,
    ) -> None:
        self.tools = tools or ToolConfig()
        self.tmpdir = tmpdir
        self.sniff_lines = sniff_lines
        self._runner = runner or self._default_runner
        self.logger = get_logger("executor")

    def execute(self, triples: Sequence[VerificationTriple]) -> ExecutionReport:
        report = ExecutionReport()
        for index, triple in enumerate(triples, start=1):
            self.logger.info(
                "[%d/%d] Verifying %s against %s with %s",
                index,
                len(triples),
                triple.signature.name,
                triple.source.name,
                triple.keyring.name,
            )
            with log_subject(triple.signature.name):
                self.verify(triple)
            report.verified.append(triple)
        return report

    def verify(self, triple: VerificationTriple) -> None:
        """Verify a single triple inside a freshly created keyring store."""
        if self.tmpdir is not None:
            self.tmpdir.mkdir(parents=True, exist_ok=True)
        store = Path(tempfile.mkdtemp(prefix=_STORE_PREFIX, dir=self.tmpdir))
        self.logger.debug("Created keyring store %s", store)
        try:
            keyring = self._import_keyring(triple, store)
            self._verify_signature(triple, store, keyring)
        finally:
            shutil.rmtree(store, ignore_errors=True)
            self.logger.debug("Removed keyring store %s", store)

    # ------------------------------------------------------------------
    # Internals

    def _import_keyring(self, triple: VerificationTriple, store: Path) -> Path:
        target = store / _KEYRING_NAME
        keyring = triple.keyring
        try:
            armored = contains_marker(read_leading_lines(keyring, self.sniff_lines), PUBLIC_KEY_MARKER)
            binary = not armored and _starts_with_public_key_packet(keyring)
        except OSError as exc:
            raise InvalidKeyringError(
                triple.signature.name, f"{keyring.name}: cannot read keyring: {exc}"
            ) from exc

        if binary:
            try:
                shutil.copyfile(keyring, target)
            except OSError as exc:
                raise InvalidKeyringError(
                    triple.signature.name, f"{keyring.name}: cannot copy keyring: {exc}"
                ) from exc
            return target
        if not armored:
            raise InvalidKeyringError(
                triple.signature.name, f"{keyring.name}: file holds no public key material"
            )

        args = [
            self.tools.gpg,
            "--batch",
            "--yes",
            "--homedir",
            str(store),
            "--output",
            str(target),
            "--dearmor",
            str(keyring),
        ]
        self._call(args, store, triple, f"{keyring.name}: dearmoring keyring failed")
        return target

    def _verify_signature(self, triple: VerificationTriple, store: Path, keyring: Path) -> None:
        args = [
            self.tools.gpgv,
            "--homedir",
            str(store),
            "--keyring",
            str(keyring),
            str(triple.signature),
            str(triple.source),
        ]
        self._call(
            args,
            store,
            triple,
            f"{triple.signature.name}: signature does not verify {triple.source.name}"
            f" with {triple.keyring.name}",
        )
        self.logger.info("Good signature %s for %s", triple.signature.name, triple.source.name)

    def _call(
        self, args: List[str], store: Path, triple: VerificationTriple, failure: str
    ) -> str:
        env = os.environ.copy()
        env["GNUPGHOME"] = str(store)
        try:
            return self._run(args, cwd=store, env=env, capture_output=True)
        except subprocess.CalledProcessError as exc:
            detail = _describe_output(exc)
            message = f"{failure} (exit status {exc.returncode})"
            if detail:
                message = f"{message}\n{detail}"
            raise VerificationFailure(triple.signature.name, message) from exc
        except OSError as exc:
            raise VerificationFailure(
                triple.signature.name, f"{failure}: cannot run {args[0]}: {exc}"
            ) from exc

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, env=env, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


def _starts_with_public_key_packet(path: Path) -> bool:
    with path.open("rb") as handle:
        header = handle.read(1)
    if not header:
        return False
    octet = header[0]
    if not octet & 0x80:
        return False
    if octet & 0x40:
        tag = octet & 0x3F
    else:
        tag = (octet >> 2) & 0x0F
    return tag == _PUBLIC_KEY_TAG


def _describe_output(exc: subprocess.CalledProcessError) -> str:
    parts = []
    for stream in (exc.stdout, exc.stderr):
        if not stream:
            continue
        text = stream.decode("utf-8", "replace") if isinstance(stream, bytes) else str(stream)
        if text.strip():
            parts.append(text.strip())
    return "\n".join(parts)


__all__ = ["ExecutionReport", "VerificationExecutor"]
