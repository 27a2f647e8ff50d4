"""Custom exceptions for the ranging broker."""

from .messages import ErrorCode


class RangingError(Exception):
    """Base exception for ranging broker errors."""

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class NetworkError(RangingError):
    """Raised when the directory request fails at the transport level."""

    def __init__(self, message: str):
        super().__init__(
            ErrorCode.NETWORK_ERROR,
            f"Network error: {message}",
        )


class RemoteError(RangingError):
    """Raised when the directory answers with a non-200 status."""

    def __init__(self, status_code: int):
        super().__init__(
            ErrorCode.REMOTE_ERROR,
            f"Unexpected HTTP status code: {status_code}",
        )
        self.status_code = status_code


class DecodeError(RangingError):
    """Raised when the response body is not JSON matching the schema."""

    def __init__(self, message: str):
        super().__init__(
            ErrorCode.DECODE_ERROR,
            f"Failed to parse response body: {message}",
        )


class ServerRejectedError(RangingError):
    """Raised when the directory reports success=false."""

    def __init__(self, operation: str):
        super().__init__(
            ErrorCode.SERVER_REJECTED,
            f"Directory rejected {operation} request",
        )
        self.operation = operation


class TokenDecodeError(RangingError):
    """Raised when a token payload cannot be decoded."""

    def __init__(self, message: str):
        super().__init__(
            ErrorCode.TOKEN_DECODE_ERROR,
            f"Failed to decode discovery token: {message}",
        )
