"""Dependency Injection container."""

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

import httpx

from todogether.core.config import AppConfig
from todogether.core.protocols import AuthView, KeyValueStorage

if TYPE_CHECKING:
    from todogether.api.gateway import RequestGateway
    from todogether.api.sync import RealtimeSync
    from todogether.api.todos import TodoService
    from todogether.auth.client import AuthClient
    from todogether.auth.guard import AuthGuard
    from todogether.auth.token_store import TokenStore


@dataclass
class Container:
    """Manual DI container holding one isolated client session.

    - Explicit dependency resolution (no framework magic)
    - Lazy initialization (created on actual use)
    - override() for test mock replacement
    """

    config: AppConfig

    # --- override slots (for testing) ---
    _storage_override: KeyValueStorage | None = field(default=None, repr=False)
    _http_client_override: httpx.AsyncClient | None = field(default=None, repr=False)
    _view_override: AuthView | None = field(default=None, repr=False)

    # --- Provider accessors ---

    @cached_property
    def storage(self) -> KeyValueStorage:
        """Durable storage for the session record."""
        if self._storage_override is not None:
            return self._storage_override
        from todogether.storage import StorageFactory

        return StorageFactory.create(self.config.auth)

    @cached_property
    def token_store(self) -> "TokenStore":
        """Session tokens, loaded from storage on first use."""
        from todogether.auth.token_store import TokenStore

        store = TokenStore(self.storage, key=self.config.auth.storage_key)
        store.load()
        return store

    @cached_property
    def http_client(self) -> httpx.AsyncClient:
        """Shared HTTP client; per-call timeouts override the default."""
        if self._http_client_override is not None:
            return self._http_client_override
        return httpx.AsyncClient(
            timeout=self.config.request.timeout,
            verify=self.config.api.verify_ssl,
        )

    @cached_property
    def auth_client(self) -> "AuthClient":
        from todogether.auth.client import AuthClient

        return AuthClient(
            endpoints=self.config.endpoints,
            token_store=self.token_store,
            http_client=self.http_client,
            config=self.config.auth,
        )

    @cached_property
    def gateway(self) -> "RequestGateway":
        from todogether.api.gateway import RequestGateway

        return RequestGateway(
            auth_client=self.auth_client,
            http_client=self.http_client,
            config=self.config.request,
            app_version=self.config.version,
            environment=self.config.environment,
        )

    @cached_property
    def todo_service(self) -> "TodoService":
        from todogether.api.todos import TodoService

        return TodoService(gateway=self.gateway, endpoints=self.config.endpoints)

    @cached_property
    def realtime_sync(self) -> "RealtimeSync":
        from todogether.api.sync import RealtimeSync

        return RealtimeSync(self.todo_service, interval=self.config.effective_sync_interval)

    @cached_property
    def guard(self) -> "AuthGuard":
        """Auth guard wired to stop polling on logout."""
        from todogether.auth.guard import AuthGuard

        async def stop_sync() -> None:
            self.realtime_sync.stop()

        return AuthGuard(
            auth_client=self.auth_client,
            view=self._view_override,
            validation_timeout=self.config.auth.validation_timeout,
            min_password_length=self.config.auth.min_password_length,
            on_logout=stop_sync,
        )

    async def aclose(self) -> None:
        """Stop background work and close the HTTP client."""
        if "realtime_sync" in self.__dict__:
            self.realtime_sync.stop()
        if "http_client" in self.__dict__ and self._http_client_override is None:
            await self.http_client.aclose()

    # --- Test support ---

    def override(self, **kwargs) -> "Container":
        """Create a new container with overridden dependencies.

        Usage:
            test_container = container.override(storage=InMemoryStorage())
        """
        new = Container(config=self.config)
        for key, value in kwargs.items():
            if hasattr(new, f"_{key}_override"):
                setattr(new, f"_{key}_override", value)
        return new
