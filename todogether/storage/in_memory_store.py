"""In-memory storage for tests and throwaway sessions."""

from todogether.core.logging import get_logger
from todogether.storage.factory import StorageFactory

logger = get_logger(__name__)


@StorageFactory.register("in_memory")
class InMemoryStorage:
    """Dictionary-backed storage. Not persistent - data is lost on exit."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        logger.debug("in_memory_storage_initialized", keys=list(self._data))

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
