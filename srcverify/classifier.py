"""Heuristic detection of signatures and keyrings among declared sources."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .config import ClassifierConfig
from .errors import ClassificationError
from .logging import get_logger
from .models import ClassifiedSource, FileRole, SourceFile

SIGNATURE_MARKER = b"BEGIN PGP SIGNATURE"
PUBLIC_KEY_MARKER = b"BEGIN PGP PUBLIC KEY BLOCK"

# Bounds a single "line" so sniffing a large binary archive stays cheap.
_MAX_LINE_BYTES = 8192


def read_leading_lines(path: Path, limit: int) -> List[bytes]:
    """Return up to ``limit`` lines from the start of ``path`` in binary mode."""
    lines: List[bytes] = []
    with path.open("rb") as handle:
        while len(lines) < limit:
            line = handle.readline(_MAX_LINE_BYTES)
            if not line:
                break
            lines.append(line)
    return lines


def contains_marker(lines: Iterable[bytes], marker: bytes) -> bool:
    return any(marker in line for line in lines)


class FileClassifier:
    """Labels declared sources as plain sources, signatures or keyrings."""

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        self.config = config or ClassifierConfig()
        self._signature_extensions = tuple(ext.lower() for ext in self.config.signature_extensions)
        self._keyring_extensions = tuple(ext.lower() for ext in self.config.keyring_extensions)
        self._excluded_names = frozenset(self.config.excluded_names)
        self._cache: Dict[Path, FileRole] = {}
        self.logger = get_logger("classifier")

    def classify(self, source: SourceFile | Path) -> FileRole:
        """Return the role of a single file, caching the answer per path."""
        path = source.path if isinstance(source, SourceFile) else Path(source)
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        role = self._classify_path(path)
        self._cache[path] = role
        self.logger.debug("Classified %s as %s", path.name, role.value)
        return role

    def classify_all(self, sources: Sequence[SourceFile]) -> List[ClassifiedSource]:
        """Classify every declared source, preserving declaration order."""
        return [ClassifiedSource(source=source, role=self.classify(source)) for source in sources]

    def _classify_path(self, path: Path) -> FileRole:
        name = path.name
        if name in self._excluded_names:
            return FileRole.PLAIN_SOURCE
        if name.lower().endswith(self._signature_extensions):
            return FileRole.SIGNATURE

        lines = self._sniff(path)
        has_signature = contains_marker(lines, SIGNATURE_MARKER)
        has_key = contains_marker(lines, PUBLIC_KEY_MARKER)
        if has_signature and has_key:
            raise ClassificationError(
                f"{name}: contains both a PGP signature and a PGP public key block"
            )
        if has_signature:
            return FileRole.SIGNATURE
        if self._has_keyring_name(name) or has_key:
            return FileRole.KEYRING
        return FileRole.PLAIN_SOURCE

    def _has_keyring_name(self, name: str) -> bool:
        return name.lower().endswith(self._keyring_extensions)

    def _sniff(self, path: Path) -> List[bytes]:
        try:
            return read_leading_lines(path, self.config.sniff_lines)
        except OSError as exc:
            self.logger.debug("Cannot read %s (%s); classifying by name only", path, exc)
            return []


__all__ = [
    "FileClassifier",
    "PUBLIC_KEY_MARKER",
    "SIGNATURE_MARKER",
    "contains_marker",
    "read_leading_lines",
]
