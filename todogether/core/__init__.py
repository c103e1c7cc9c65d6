"""Core infrastructure module - config, DI container, protocols, exceptions."""

from todogether.core.config import ApiConfig, ApiEndpoints, AppConfig, AuthConfig, RequestConfig
from todogether.core.container import Container
from todogether.core.exceptions import (
    ApiError,
    AppError,
    AuthenticationFailedError,
    AuthError,
    NetworkError,
    NotAuthenticatedError,
    RequestTimeoutError,
    TokenRefreshError,
)

__all__ = [
    "AppConfig",
    "ApiConfig",
    "AuthConfig",
    "RequestConfig",
    "ApiEndpoints",
    "Container",
    "AppError",
    "ApiError",
    "AuthError",
    "AuthenticationFailedError",
    "NetworkError",
    "NotAuthenticatedError",
    "RequestTimeoutError",
    "TokenRefreshError",
]
