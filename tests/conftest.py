"""Common test fixtures."""

import inspect
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from jose import jwt

from todogether.api.gateway import RequestGateway
from todogether.auth.client import AuthClient
from todogether.auth.token_store import TokenStore
from todogether.core.config import ApiConfig, AppConfig, AuthConfig, RequestConfig
from todogether.storage import InMemoryStorage

BASE_URL = "https://api.test/"
STORAGE_KEY = "todogether_tokens"


def make_token(expires_in: float = 3600, subject: str = "1") -> str:
    """Mint a signed JWT whose ``exp`` lies ``expires_in`` seconds from now."""
    claims = {"sub": subject, "exp": int(time.time() + expires_in)}
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def reply(
    status_code: int = 200, json: Any = None, **kwargs
) -> Callable[[httpx.Request], httpx.Response]:
    """Response factory for MockBackend routes."""

    def build(request: httpx.Request) -> httpx.Response:
        if json is None:
            return httpx.Response(status_code, **kwargs)
        return httpx.Response(status_code, json=json, **kwargs)

    return build


class MockBackend:
    """Scripted backend for ``httpx.MockTransport``.

    Routes are keyed by (method, path). Each route holds a queue of entries;
    the last entry repeats once the queue is drained. An entry is either a
    callable taking the request (sync or async) or an exception to raise.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *entries: Any) -> "MockBackend":
        self.routes.setdefault((method.upper(), path), []).extend(entries)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "no route"})

        entry = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(entry, BaseException):
            raise entry
        response = entry(request)
        if inspect.isawaitable(response):
            response = await response
        return response


class RecordingView:
    """AuthView that records every call."""

    def __init__(self):
        self.events: list[tuple] = []

    def show_login(self) -> None:
        self.events.append(("show_login",))

    def show_app(self, user) -> None:
        self.events.append(("show_app", user))

    def show_error(self, form: str, message: str) -> None:
        self.events.append(("show_error", form, message))

    def hide_error(self, form: str) -> None:
        self.events.append(("hide_error", form))

    def set_loading(self, form: str, loading: bool) -> None:
        self.events.append(("set_loading", form, loading))

    def names(self) -> list[str]:
        return [event[0] for event in self.events]

    def errors(self) -> list[tuple[str, str]]:
        return [(event[1], event[2]) for event in self.events if event[0] == "show_error"]


@pytest.fixture
def test_config() -> AppConfig:
    """Create test configuration."""
    return AppConfig(
        environment="development",
        version="1.0.0",
        api=ApiConfig(base_url=BASE_URL),
        auth=AuthConfig(storage_backend="in_memory", storage_key=STORAGE_KEY),
        request=RequestConfig(retry_attempts=3, timeout=10.0),
    )


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def http_client(backend: MockBackend) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(backend))


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def token_store(storage: InMemoryStorage) -> TokenStore:
    return TokenStore(storage, key=STORAGE_KEY)


@pytest.fixture
def auth_client(test_config: AppConfig, token_store: TokenStore, http_client) -> AuthClient:
    return AuthClient(
        endpoints=test_config.endpoints,
        token_store=token_store,
        http_client=http_client,
        config=test_config.auth,
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the gateway, recorded instead of slept."""
    return []


@pytest.fixture
def gateway(test_config: AppConfig, auth_client: AuthClient, http_client, sleeps) -> RequestGateway:
    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    return RequestGateway(
        auth_client=auth_client,
        http_client=http_client,
        config=test_config.request,
        app_version=test_config.version,
        environment=test_config.environment,
        sleep=fake_sleep,
    )


@pytest.fixture
def logged_in(token_store: TokenStore) -> str:
    """Start from a valid session; returns the access token."""
    access_token = make_token()
    token_store.save(access_token, "refresh-1")
    return access_token


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()
