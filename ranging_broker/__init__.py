"""
Peer ranging broker.

Exchanges discovery tokens through a directory service and coordinates a
single-peer ranging session on top of an opaque ranging capability.
"""

from .capability import CapabilityDelegate, NearbyObject, RangingCapability
from .core import EventRelay, SessionCoordinator
from .directory import TokenDirectoryClient
from .observability.logging import configure_logging
from .protocol import (
    DecodeError,
    DiscoveryToken,
    ErrorCode,
    NetworkError,
    RangingError,
    RemoteError,
    RemovalReason,
    ServerRejectedError,
    SessionState,
    TokenDecodeError,
)

__version__ = "0.1.0"

__all__ = [
    "CapabilityDelegate",
    "DecodeError",
    "DiscoveryToken",
    "ErrorCode",
    "EventRelay",
    "NearbyObject",
    "NetworkError",
    "RangingCapability",
    "RangingError",
    "RemoteError",
    "RemovalReason",
    "ServerRejectedError",
    "SessionCoordinator",
    "SessionState",
    "TokenDecodeError",
    "TokenDirectoryClient",
    "configure_logging",
]
