"""Grammar for explicit source/signature/keyring pairing arguments."""

from __future__ import annotations

from typing import List

from .errors import ArgumentParseError
from .logging import get_logger
from .models import PairingRequest
from .sources import SourceResolver


class PairingArgumentParser:
    """Turns ``SOURCE,SIGNATURE[,KEYRING]`` tokens into pairing requests.

    Each field is a source reference (number or base filename). Two-field
    tokens rely on the default keyring; three-field tokens name their own.
    Parsing stops at the first bad token.
    """

    def __init__(self, resolver: SourceResolver) -> None:
        self.resolver = resolver
        self.logger = get_logger("arguments")

    def parse(self, raw_args: str | None) -> List[PairingRequest]:
        requests: List[PairingRequest] = []
        for token in (raw_args or "").split():
            requests.append(self._parse_token(token))
        if requests:
            self.logger.debug("Parsed %d explicit pairing request(s)", len(requests))
        return requests

    def _parse_token(self, token: str) -> PairingRequest:
        fields = token.split(",")
        if len(fields) not in (2, 3):
            raise ArgumentParseError(token)
        if not all(fields):
            raise ArgumentParseError(token, "empty field")

        source = self.resolver.resolve(fields[0])
        signature = self.resolver.resolve(fields[1])
        keyring = self.resolver.resolve(fields[2]) if len(fields) == 3 else None
        return PairingRequest(token=token, source=source, signature=signature, keyring=keyring)


__all__ = ["PairingArgumentParser"]
