"""Durable key-value storage for the session record."""

from todogether.storage.factory import StorageFactory
from todogether.storage.file_store import FileStorage
from todogether.storage.in_memory_store import InMemoryStorage

__all__ = ["StorageFactory", "FileStorage", "InMemoryStorage"]
