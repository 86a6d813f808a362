"""Exception types raised by the LearnWorlds client."""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Stable error codes carried by ApiError."""

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class LearnWorldsError(Exception):
    """Base class for all client errors."""


class TokenError(LearnWorldsError):
    """An OAuth2 operation was attempted without the credential it needs."""


class NoAccessTokenError(TokenError):
    def __init__(self, message: str = "No access token available. Please authenticate first."):
        super().__init__(message)


class NoRefreshTokenError(TokenError):
    def __init__(self, message: str = "No refresh token available"):
        super().__init__(message)


class NoTokenToRevokeError(TokenError):
    def __init__(self, message: str = "No token to revoke"):
        super().__init__(message)


class ApiError(LearnWorldsError):
    """Normalized error for every failed resource API request.

    Attributes:
        code: Classification of the failure
        message: Human readable message
        status: HTTP status, when a response was received
        details: Decoded response body (or envelope errors), when available
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details

    def __repr__(self) -> str:
        return (
            f"ApiError(code={self.code.value}, status={self.status}, "
            f"message={self.message!r})"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "status": self.status,
            "details": self.details,
        }
