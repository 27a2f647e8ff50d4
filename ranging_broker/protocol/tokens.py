"""Discovery token value type and its base64 wire form."""

import base64
import binascii
from dataclasses import dataclass

from .errors import TokenDecodeError


@dataclass(frozen=True)
class DiscoveryToken:
    """Opaque identity blob that lets two devices address each other."""

    data: bytes

    def to_base64(self) -> str:
        """Encode the token for the directory wire format."""
        return base64.b64encode(self.data).decode("ascii")

    @classmethod
    def from_base64(cls, encoded: str) -> "DiscoveryToken":
        """
        Decode a token received from the directory.

        Raises:
            TokenDecodeError: If the payload is not strict base64 or is empty
        """
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise TokenDecodeError(str(e)) from e

        if not data:
            raise TokenDecodeError("empty token payload")

        return cls(data=data)

    def __repr__(self) -> str:
        return f"DiscoveryToken({len(self.data)} bytes)"
