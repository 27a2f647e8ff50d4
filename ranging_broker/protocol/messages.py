"""Pydantic models and enums for the directory protocol and session state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class ErrorCode(str, Enum):
    """Error codes carried by RangingError."""

    NETWORK_ERROR = "NETWORK_ERROR"
    REMOTE_ERROR = "REMOTE_ERROR"
    DECODE_ERROR = "DECODE_ERROR"
    SERVER_REJECTED = "SERVER_REJECTED"
    TOKEN_DECODE_ERROR = "TOKEN_DECODE_ERROR"
    UNSUPPORTED_PLATFORM = "UNSUPPORTED_PLATFORM"


class SessionState(str, Enum):
    """Lifecycle states of a ranging session."""

    IDLE = "idle"
    LOCAL_TOKEN_PUBLISHED = "local_token_published"
    AWAITING_PEER_TOKEN = "awaiting_peer_token"
    PEER_TOKEN_RESOLVED = "peer_token_resolved"
    RUNNING = "running"
    SUSPENDED = "suspended"
    INVALIDATED = "invalidated"


class RemovalReason(str, Enum):
    """Why the capability layer dropped a nearby object."""

    TIMEOUT = "timeout"
    PEER_ENDED = "peer_ended"
    UNKNOWN = "unknown"


# =============================================================================
# Directory wire models
# =============================================================================


class PublishRequest(BaseModel):
    """Body of a publish request."""

    token: str = Field(..., description="Base64-encoded discovery token")


class DirectoryResponse(BaseModel):
    """
    Response body shared by publish and fetch.

    ``id`` and ``token`` may be missing when the server rejects the call;
    callers check ``success`` before reading them. Types are checked
    strictly: "42" is not an id and "true" is not a boolean.
    """

    model_config = ConfigDict(strict=True)

    id: int | None = Field(default=None, description="Directory entry id")
    token: str | None = Field(
        default=None,
        description="Base64-encoded discovery token",
    )
    success: bool = Field(..., description="Whether the server accepted the call")
