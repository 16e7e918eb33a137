"""Core data models shared across srcverify components."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class FileRole(str, Enum):
    """Role a declared source plays in signature verification."""

    PLAIN_SOURCE = "plain-source"
    SIGNATURE = "signature"
    KEYRING = "keyring"


@dataclass(frozen=True)
class SourceFile:
    """A source file declared by the host build."""

    path: Path
    ordinal: int
    number: int

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class ClassifiedSource:
    """Declared source paired with its detected role."""

    source: SourceFile
    role: FileRole


@dataclass(frozen=True)
class PairingRequest:
    """Verification unit requested through the pairing arguments."""

    token: str
    source: SourceFile
    signature: SourceFile
    keyring: Optional[SourceFile] = None

    @property
    def needs_default_keyring(self) -> bool:
        return self.keyring is None


@dataclass(frozen=True)
class VerificationTriple:
    """Resolved unit of work handed to the verifier."""

    source: Path
    signature: Path
    keyring: Path

    def as_dict(self) -> dict[str, str]:
        return {
            "source": str(self.source),
            "signature": str(self.signature),
            "keyring": str(self.keyring),
        }
