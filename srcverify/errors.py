"""Error taxonomy for signature verification runs.

Every error is fatal to the invocation. Each class carries the exit status the
CLI terminates with so the host build can tell failure kinds apart.
"""

from __future__ import annotations


class SrcVerifyError(RuntimeError):
    """Base class for failures that abort a verification run."""

    exit_code = 1


class SourceReferenceError(SrcVerifyError):
    """A reference does not resolve to exactly one declared source."""

    exit_code = 3

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"source reference '{reference}': {reason}")
        self.reference = reference
        self.reason = reason


class ArgumentParseError(SrcVerifyError):
    """A pairing token does not match the two- or three-field grammar."""

    exit_code = 2

    def __init__(self, token: str, reason: str | None = None) -> None:
        detail = reason or "expected SOURCE,SIGNATURE or SOURCE,SIGNATURE,KEYRING"
        super().__init__(f"invalid pairing argument '{token}': {detail}")
        self.token = token


class ClassificationError(SrcVerifyError):
    """File contents carry contradictory signature and keyring markers."""

    exit_code = 6


class ResolutionConflict(SrcVerifyError):
    """Pairing inputs are contradictory or lack a keyring."""

    exit_code = 4


class PairingGap(SrcVerifyError):
    """A signature has no counterpart in the plan."""

    exit_code = 5

    def __init__(self, signature: str, reason: str) -> None:
        super().__init__(f"{signature}: {reason}")
        self.signature = signature


class VerificationFailure(SrcVerifyError):
    """The external verifier rejected a signature."""

    exit_code = 1

    def __init__(self, signature: str, message: str) -> None:
        super().__init__(message)
        self.signature = signature


class InvalidKeyringError(VerificationFailure):
    """The chosen keyring file holds no public key material."""


__all__ = [
    "ArgumentParseError",
    "ClassificationError",
    "InvalidKeyringError",
    "PairingGap",
    "ResolutionConflict",
    "SourceReferenceError",
    "SrcVerifyError",
    "VerificationFailure",
]
