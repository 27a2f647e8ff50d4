"""Directory wire models, error types and the discovery token."""

from .errors import (
    DecodeError,
    NetworkError,
    RangingError,
    RemoteError,
    ServerRejectedError,
    TokenDecodeError,
)
from .messages import (
    DirectoryResponse,
    ErrorCode,
    PublishRequest,
    RemovalReason,
    SessionState,
)
from .tokens import DiscoveryToken

__all__ = [
    "DecodeError",
    "DirectoryResponse",
    "DiscoveryToken",
    "ErrorCode",
    "NetworkError",
    "PublishRequest",
    "RangingError",
    "RemoteError",
    "RemovalReason",
    "ServerRejectedError",
    "SessionState",
    "TokenDecodeError",
]
