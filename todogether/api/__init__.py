"""Backend data access: request gateway, todo service and polling sync."""

from todogether.api.gateway import BackoffPolicy, RequestGateway
from todogether.api.sync import RealtimeSync, SyncSnapshot
from todogether.api.todos import TodoService

__all__ = [
    "BackoffPolicy",
    "RequestGateway",
    "RealtimeSync",
    "SyncSnapshot",
    "TodoService",
]
