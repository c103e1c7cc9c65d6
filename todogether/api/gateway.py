"""Authenticated request gateway with retry and exponential backoff."""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from todogether.auth.client import AuthClient
from todogether.core.config import RequestConfig
from todogether.core.exceptions import (
    ApiError,
    AppError,
    AuthenticationFailedError,
    NetworkError,
    RequestTimeoutError,
)
from todogether.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay before the next attempt: ``factor * base ** attempt`` seconds.

    ``attempt`` is the 1-based number of the attempt that just failed, so the
    defaults wait 2s, then 4s, ... Uncapped unless ``maximum`` is set.
    """

    factor: float = 1.0
    base: float = 2.0
    maximum: float | None = None
    jitter: float = 0.0

    @classmethod
    def from_config(cls, config: RequestConfig) -> "BackoffPolicy":
        return cls(
            factor=config.backoff_factor,
            base=config.backoff_base,
            maximum=config.backoff_max,
            jitter=config.backoff_jitter,
        )

    def delay(self, attempt: int) -> float:
        delay = self.factor * self.base**attempt
        if self.maximum is not None:
            delay = min(delay, self.maximum)
        if self.jitter > 0:
            delay += random.uniform(0, self.jitter)
        return delay


class RequestGateway:
    """Sends JSON requests on behalf of the logged-in user.

    Per call, at most ``retry_attempts`` attempts:

    - an expired access token is refreshed before each attempt;
    - a 401 refreshes once and moves on to the next attempt;
    - other 4xx fail immediately;
    - 5xx and transport errors back off and retry.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        http_client: httpx.AsyncClient,
        config: RequestConfig | None = None,
        app_version: str = "1.0.0",
        environment: str = "development",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.auth_client = auth_client
        self.http_client = http_client
        self.config = config or RequestConfig()
        self.backoff = BackoffPolicy.from_config(self.config)
        self.app_version = app_version
        self.environment = environment
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self.config.retry_attempts

    def get_headers(self) -> dict[str, str]:
        """Headers for the next attempt, including the current bearer token."""
        headers = {
            "Content-Type": "application/json",
            "X-App-Version": self.app_version,
            "X-Environment": self.environment,
        }
        headers.update(self.auth_client.get_auth_header())
        return headers

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            endpoint: Absolute URL
            method: HTTP method
            body: JSON-serializable request body
            params: Query parameters

        Returns:
            Parsed JSON body, or None for an empty response

        Raises:
            AuthenticationFailedError: If the session was lost and could not be refreshed
            ApiError: On a non-2xx status that was not retried away
            NetworkError: If the backend stayed unreachable
            AppError: If a 2xx body is not valid JSON
        """
        last_error: AppError | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                await self._ensure_session()
                response = await self._send(endpoint, method, body, params)

                if response.status_code == 401 and attempt < self.max_retries:
                    logger.info(
                        "request_unauthorized_refreshing", endpoint=endpoint, attempt=attempt
                    )
                    await self._refresh_or_fail()
                    continue

                if not response.is_success:
                    raise ApiError(response.status_code, reason=response.reason_phrase)

                return self._decode(response)

            except (ApiError, NetworkError) as e:
                last_error = e
                logger.warning(
                    "request_attempt_failed",
                    endpoint=endpoint,
                    method=method,
                    attempt=attempt,
                    max_retries=self.max_retries,
                    error=e.message,
                )

                if isinstance(e, ApiError) and e.is_client_error and not e.is_unauthorized:
                    break

                if attempt < self.max_retries:
                    delay = self.backoff.delay(attempt)
                    logger.debug("request_backoff", endpoint=endpoint, attempt=attempt, delay=delay)
                    await self._sleep(delay)

        logger.error("request_failed", endpoint=endpoint, method=method, error=str(last_error))
        raise last_error or AppError("Max retries exceeded")

    async def _ensure_session(self) -> None:
        if not self.auth_client.is_authenticated:
            return
        try:
            await self.auth_client.ensure_valid_token()
        except AppError as e:
            logger.warning("request_token_refresh_failed", error=e.message)
            self.auth_client.clear_tokens()
            raise AuthenticationFailedError() from e

    async def _refresh_or_fail(self) -> None:
        try:
            await self.auth_client.refresh_access_token()
        except AppError as e:
            logger.warning("request_token_refresh_failed", error=e.message)
            self.auth_client.clear_tokens()
            raise AuthenticationFailedError() from e

    async def _send(
        self,
        endpoint: str,
        method: str,
        body: Any,
        params: dict[str, Any] | None,
    ) -> httpx.Response:
        try:
            return await self.http_client.request(
                method,
                endpoint,
                json=body,
                params=params,
                headers=self.get_headers(),
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {endpoint} failed: {e}") from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise AppError(f"Invalid JSON from server: {e}", code="INVALID_RESPONSE") from e

    # --- Convenience ---

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request(endpoint, params=params)

    async def post(self, endpoint: str, body: Any = None) -> Any:
        return await self.request(endpoint, method="POST", body=body)

    async def put(self, endpoint: str, body: Any = None) -> Any:
        return await self.request(endpoint, method="PUT", body=body)

    async def delete(self, endpoint: str) -> Any:
        return await self.request(endpoint, method="DELETE")
