"""Factory for creating key-value storage instances."""

from todogether.core.config import AuthConfig
from todogether.core.exceptions import ConfigurationError
from todogether.core.protocols import KeyValueStorage


class StorageFactory:
    """Factory for creating storage instances using registry pattern."""

    _registry: dict[str, type[KeyValueStorage]] = {}

    @classmethod
    def register(cls, backend: str):
        """Decorator to register a storage implementation.

        Usage:
            @StorageFactory.register("file")
            class FileStorage:
                ...
        """

        def decorator(storage_cls: type) -> type:
            cls._registry[backend] = storage_cls
            return storage_cls

        return decorator

    @classmethod
    def create(cls, config: AuthConfig) -> KeyValueStorage:
        """Create storage from configuration.

        Args:
            config: Auth configuration

        Returns:
            KeyValueStorage instance

        Raises:
            ConfigurationError: If backend is not registered
        """
        storage_cls = cls._registry.get(config.storage_backend)
        if storage_cls is None:
            raise ConfigurationError(
                f"Unknown storage backend: {config.storage_backend}. "
                f"Available: {list(cls._registry.keys())}"
            )

        if config.storage_backend == "file":
            return storage_cls(config.storage_path)
        return storage_cls()

    @classmethod
    def available_backends(cls) -> list[str]:
        """Get list of available backend names."""
        return list(cls._registry.keys())
