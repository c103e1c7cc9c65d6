"""Custom exception hierarchy.

Expected business rejections (bad credentials) are returned as values by the
auth client. Everything here is an infrastructure or session failure.
"""

from typing import Any


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display or structured logging."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class ConfigurationError(AppError):
    """Configuration error."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIG_ERROR")


class StorageError(AppError):
    """Durable storage could not be read or written."""

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")


class NetworkError(AppError):
    """The backend could not be reached (DNS, refused connection, reset)."""

    def __init__(self, message: str, code: str = "NETWORK_ERROR"):
        super().__init__(message, code=code)


class RequestTimeoutError(NetworkError):
    """A call exceeded its deadline and was cancelled."""

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message, code="TIMEOUT")


class ApiError(AppError):
    """Backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str | None = None, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(
            message or f"API Error: {status_code} {reason}".rstrip(),
            code="API_ERROR",
        )

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["error"]["details"] = {"status_code": self.status_code}
        return result


class AuthError(AppError):
    """Base class for session failures that need fresh credentials."""

    def __init__(self, message: str, code: str = "AUTH_ERROR"):
        super().__init__(message, code=code)


class NotAuthenticatedError(AuthError):
    """An operation needed a token the session does not hold."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="NOT_AUTHENTICATED")


class TokenRefreshError(AuthError):
    """The refresh endpoint rejected the refresh token or answered garbage."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, code="TOKEN_REFRESH_FAILED")


class AuthenticationFailedError(AuthError):
    """A gateway call lost its session and cannot continue."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTHENTICATION_FAILED")
