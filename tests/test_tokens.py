"""
Tests for DiscoveryToken encoding.
"""

import pytest

from ranging_broker.protocol.errors import TokenDecodeError
from ranging_broker.protocol.messages import ErrorCode
from ranging_broker.protocol.tokens import DiscoveryToken


class TestDiscoveryToken:
    """Tests for the base64 wire form."""

    @pytest.mark.parametrize(
        "data",
        [b"\x00", b"local-token", bytes(range(256))],
    )
    def test_round_trip(self, data):
        """Encoding then decoding should give back the same token."""
        token = DiscoveryToken(data)
        assert DiscoveryToken.from_base64(token.to_base64()) == token

    def test_to_base64(self):
        assert DiscoveryToken(b"peer").to_base64() == "cGVlcg=="

    def test_rejects_malformed_base64(self):
        with pytest.raises(TokenDecodeError) as exc_info:
            DiscoveryToken.from_base64("not base64!")

        assert exc_info.value.code == ErrorCode.TOKEN_DECODE_ERROR

    def test_rejects_bad_padding(self):
        with pytest.raises(TokenDecodeError):
            DiscoveryToken.from_base64("cGVlcg=")

    def test_rejects_non_ascii(self):
        with pytest.raises(TokenDecodeError):
            DiscoveryToken.from_base64("tökén")

    def test_rejects_empty_payload(self):
        """An empty string decodes to no bytes, which is not a token."""
        with pytest.raises(TokenDecodeError, match="empty"):
            DiscoveryToken.from_base64("")

    def test_is_immutable(self):
        token = DiscoveryToken(b"abc")
        with pytest.raises(AttributeError):
            token.data = b"xyz"

    def test_repr_hides_contents(self):
        assert repr(DiscoveryToken(b"secret")) == "DiscoveryToken(6 bytes)"
