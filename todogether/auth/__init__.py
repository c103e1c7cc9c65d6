"""Authentication module.

Session token lifecycle against the To-dogether backend.
"""

from todogether.auth.client import AuthClient
from todogether.auth.guard import AuthGuard, AuthState
from todogether.auth.schemas import AuthFailure, AuthResult, AuthSuccess, RegisterRequest, User
from todogether.auth.token_store import TokenStore

__all__ = [
    "AuthClient",
    "AuthGuard",
    "AuthState",
    "AuthFailure",
    "AuthResult",
    "AuthSuccess",
    "RegisterRequest",
    "TokenStore",
    "User",
]
