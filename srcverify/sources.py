"""Declared source lists and resolution of source references."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from .errors import SourceReferenceError
from .models import SourceFile

_NUMBERED_SPEC = re.compile(r"^([0-9]+)=(.+)$")
_NUMERIC_REF = re.compile(r"^[0-9]+$")
_SEPARATORS = ("/", "\\")


def declare_sources(specs: Sequence[str], sourcedir: Path | None = None) -> List[SourceFile]:
    """Build the declared source list from ``[NUMBER=]PATH`` entries.

    Unnumbered entries take the previous number plus one, starting at 0 for
    the primary source. Relative paths are anchored at ``sourcedir``.
    """
    base = sourcedir.expanduser() if sourcedir is not None else None
    sources: List[SourceFile] = []
    seen_numbers: Dict[int, str] = {}
    next_number = 0
    for ordinal, spec in enumerate(specs, start=1):
        match = _NUMBERED_SPEC.match(spec)
        if match:
            number = int(match.group(1))
            raw_path = match.group(2)
        else:
            number = next_number
            raw_path = spec
        if number in seen_numbers:
            raise SourceReferenceError(
                spec, f"number {number} is already declared for {seen_numbers[number]}"
            )
        path = Path(raw_path).expanduser()
        if base is not None and not path.is_absolute():
            path = base / path
        seen_numbers[number] = raw_path
        sources.append(SourceFile(path=path, ordinal=ordinal, number=number))
        next_number = number + 1
    return sources


class SourceResolver:
    """Resolves ordinal numbers and base filenames to declared sources."""

    def __init__(self, sources: Sequence[SourceFile]) -> None:
        self._by_number: Mapping[int, SourceFile] = {source.number: source for source in sources}
        by_name: Dict[str, List[SourceFile]] = {}
        for source in sources:
            by_name.setdefault(source.name, []).append(source)
        self._by_name: Mapping[str, List[SourceFile]] = by_name

    def resolve(self, reference: str) -> SourceFile:
        """Return the single declared source that ``reference`` denotes."""
        ref = reference.strip()
        if not ref:
            raise SourceReferenceError(reference, "empty reference")
        if any(separator in ref for separator in _SEPARATORS):
            raise SourceReferenceError(
                reference, "directory components are not allowed, use a base filename"
            )
        if _NUMERIC_REF.match(ref):
            return self._resolve_number(ref, int(ref))
        return self._resolve_name(ref)

    def named(self, name: str) -> List[SourceFile]:
        """Return every declared source whose base filename is ``name``."""
        return list(self._by_name.get(name, ()))

    def _resolve_number(self, reference: str, number: int) -> SourceFile:
        source = self._by_number.get(number)
        if source is not None:
            return source
        reason = f"no source is declared with number {number}"
        primary = self._by_number.get(0)
        if number == 0:
            reason += (
                "; number 0 conventionally denotes the primary source,"
                " which this package does not declare under that number"
            )
        elif primary is not None:
            reason += (
                f"; numbering starts at 0, the primary source {primary.name} is number 0"
            )
        raise SourceReferenceError(reference, reason)

    def _resolve_name(self, reference: str) -> SourceFile:
        matches = self._by_name.get(reference, [])
        if not matches:
            raise SourceReferenceError(reference, "no declared source has this name")
        if len(matches) > 1:
            paths = ", ".join(str(source.path) for source in matches)
            raise SourceReferenceError(reference, f"name is ambiguous between {paths}")
        return matches[0]


__all__ = ["SourceResolver", "declare_sources"]
