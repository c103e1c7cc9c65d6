"""To-dogether authentication client."""

import asyncio
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from todogether.auth.schemas import (
    AuthFailure,
    AuthResult,
    AuthSuccess,
    RegisterRequest,
    TokenResponse,
    User,
)
from todogether.auth.token_store import TokenStore
from todogether.auth.tokens import is_expired
from todogether.core.config import ApiEndpoints, AuthConfig
from todogether.core.exceptions import (
    ApiError,
    NetworkError,
    NotAuthenticatedError,
    RequestTimeoutError,
    TokenRefreshError,
)
from todogether.core.logging import get_logger

logger = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, tolerating empty or non-JSON error pages."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class AuthClient:
    """Client for the backend's auth and profile endpoints.

    Owns the :class:`TokenStore`. Expected credential rejections come back as
    :class:`AuthFailure` values; transport failures and lost sessions raise
    :class:`AppError` subclasses.
    """

    def __init__(
        self,
        endpoints: ApiEndpoints,
        token_store: TokenStore,
        http_client: httpx.AsyncClient,
        config: AuthConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the auth client.

        Args:
            endpoints: Backend URLs
            token_store: Session state shared with the request gateway
            http_client: HTTP client used for every auth call
            config: Timeouts and refresh policy
            clock: Returns the current epoch time, used for expiry checks
        """
        self.endpoints = endpoints
        self.token_store = token_store
        self.http_client = http_client
        self.config = config or AuthConfig()
        self.clock = clock
        self.user: User | None = None
        self._refresh_task: asyncio.Task[str] | None = None

    # --- Session state ---

    @property
    def is_authenticated(self) -> bool:
        return self.token_store.is_authenticated

    @property
    def access_token(self) -> str | None:
        return self.token_store.access_token

    def clear_tokens(self) -> None:
        """Drop the session and the cached user."""
        self.user = None
        self.token_store.clear()

    def get_auth_header(self) -> dict[str, str]:
        """Bearer header for the current access token, or an empty dict."""
        token = self.token_store.access_token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def is_token_expired(self) -> bool:
        return is_expired(self.token_store.access_token, now=self.clock)

    async def ensure_valid_token(self) -> str | None:
        """Refresh once if the access token is expired, then return it."""
        if self.is_token_expired():
            await self.refresh_access_token()
        return self.token_store.access_token

    # --- Credential exchange ---

    async def login(self, username: str, password: str) -> AuthResult:
        """Exchange username and password for a session.

        Raises:
            NetworkError: If the backend cannot be reached
        """
        return await self._authenticate(
            self.endpoints.login,
            {"username": username, "password": password},
            action="Login",
        )

    async def register(self, data: RegisterRequest | dict[str, Any]) -> AuthResult:
        """Create an account and start a session.

        Raises:
            NetworkError: If the backend cannot be reached
        """
        if not isinstance(data, RegisterRequest):
            data = RegisterRequest.model_validate(data)
        return await self._authenticate(
            self.endpoints.register,
            data.to_payload(),
            action="Registration",
        )

    async def _authenticate(self, url: str, payload: dict[str, Any], action: str) -> AuthResult:
        try:
            response = await self.http_client.post(url, json=payload, headers=JSON_HEADERS)
        except httpx.TimeoutException as e:
            logger.error("auth_request_timeout", action=action, error=str(e))
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            logger.error("auth_request_failed", action=action, error=str(e))
            raise NetworkError(f"{action} failed: could not reach the server") from e

        data = _json_or_empty(response)
        if not response.is_success:
            message = data.get("message") or f"{action} failed: {response.status_code}"
            logger.info("auth_rejected", action=action, status_code=response.status_code)
            return AuthFailure(message=message)

        try:
            tokens = TokenResponse.model_validate(data)
        except ValidationError:
            tokens = TokenResponse()
        if not (tokens.access_token and tokens.refresh_token):
            logger.warning("auth_response_invalid", action=action, keys=sorted(data))
            return AuthFailure(message="Invalid response format")

        self.token_store.save(tokens.access_token, tokens.refresh_token)
        user_id = tokens.user_id if tokens.user_id is not None else ""
        self.user = User(id=user_id, username=tokens.username or "")
        logger.info("auth_succeeded", action=action, username=self.user.username)
        return AuthSuccess(user=self.user, invite_token=tokens.invite_token)

    # --- Refresh ---

    async def refresh_access_token(self) -> str:
        """Exchange the refresh token for a new access token.

        Overlapping callers share one in-flight request when
        ``single_flight_refresh`` is enabled.

        Raises:
            NotAuthenticatedError: If no refresh token is held
            RequestTimeoutError: If the refresh call exceeds its deadline
            TokenRefreshError: If the backend rejects the refresh
            NetworkError: If the backend cannot be reached

        Any failure after the call is issued clears the session.
        """
        if not self.token_store.refresh_token:
            raise NotAuthenticatedError("No refresh token available")

        if not self.config.single_flight_refresh:
            return await self._refresh()

        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self._refresh())
        else:
            logger.debug("token_refresh_joined")
        # Cancelling one waiter must not cancel the refresh the others share
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self) -> str:
        refresh_token = self.token_store.refresh_token
        try:
            response = await self.http_client.post(
                self.endpoints.refresh,
                json={"refreshToken": refresh_token},
                headers=JSON_HEADERS,
                timeout=self.config.refresh_timeout,
            )
            if not response.is_success:
                raise TokenRefreshError(
                    f"Token refresh failed: {response.status_code}",
                    status_code=response.status_code,
                )
            access_token = _json_or_empty(response).get("accessToken")
            if not access_token or not isinstance(access_token, str):
                raise TokenRefreshError("Invalid refresh response")
        except httpx.TimeoutException as e:
            logger.warning("token_refresh_timeout", timeout=self.config.refresh_timeout)
            self.clear_tokens()
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            logger.warning("token_refresh_unreachable", error=str(e))
            self.clear_tokens()
            raise NetworkError(f"Token refresh failed: {e}") from e
        except TokenRefreshError as e:
            logger.warning("token_refresh_failed", error=e.message, status_code=e.status_code)
            self.clear_tokens()
            raise

        self.token_store.save(access_token, refresh_token)
        logger.info("token_refreshed")
        return access_token

    # --- Profile ---

    async def get_current_user(self) -> User:
        """Fetch the profile of the logged-in user.

        A 401 triggers exactly one refresh followed by one retry.

        Raises:
            NotAuthenticatedError: If no access token is held
            ApiError: On a non-2xx status; the message carries the status code
            RequestTimeoutError: If the call exceeds its deadline
        """
        response = await self._fetch_current_user()
        if response.status_code == 401:
            logger.info("current_user_unauthorized_refreshing")
            await self.refresh_access_token()
            response = await self._fetch_current_user()

        if not response.is_success:
            raise ApiError(
                response.status_code,
                message=f"Get user failed: {response.status_code}",
                reason=response.reason_phrase,
            )

        try:
            user = User.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            message = f"Get user failed: invalid body ({e})"
            raise ApiError(response.status_code, message=message) from e

        self.user = user
        logger.debug("current_user_loaded", user_id=user.id, username=user.username)
        return user

    async def _fetch_current_user(self) -> httpx.Response:
        if not self.token_store.access_token:
            raise NotAuthenticatedError("No access token available")
        try:
            return await self.http_client.get(
                self.endpoints.current_user,
                headers=self.get_auth_header(),
                timeout=self.config.user_timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            raise NetworkError(f"Get user failed: {e}") from e

    async def update_profile(self, profile_data: dict[str, Any]) -> AuthResult:
        """Update the user's profile (username, color code).

        Raises:
            NotAuthenticatedError: If no access token is held
            NetworkError: If the backend cannot be reached
        """
        if not self.token_store.access_token:
            raise NotAuthenticatedError("No access token available")

        try:
            response = await self.http_client.put(
                self.endpoints.update_profile,
                json=profile_data,
                headers={**JSON_HEADERS, **self.get_auth_header()},
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            raise NetworkError("Profile update failed: could not reach the server") from e

        data = _json_or_empty(response)
        if not response.is_success:
            return AuthFailure(
                message=data.get("message") or f"Profile update failed: {response.status_code}"
            )

        merged = {**(self.user.model_dump(by_alias=True) if self.user else {}), **data}
        try:
            self.user = User.model_validate(merged)
        except ValidationError:
            return AuthFailure(message="Invalid response format")
        return AuthSuccess(user=self.user)

    # --- Logout ---

    async def logout(self) -> None:
        """Invalidate the refresh token server-side, then always clear locally."""
        refresh_token = self.token_store.refresh_token
        if refresh_token:
            try:
                response = await self.http_client.post(
                    self.endpoints.logout,
                    json={"refreshToken": refresh_token},
                    headers=JSON_HEADERS,
                )
                if not response.is_success:
                    logger.warning("logout_rejected", status_code=response.status_code)
            except httpx.HTTPError as e:
                logger.warning("logout_request_failed", error=str(e))

        self.clear_tokens()
        logger.info("logged_out")
