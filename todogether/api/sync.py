"""Polling sync of own and partner todo lists."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from todogether.api.schemas import TodoList
from todogether.api.todos import TodoService
from todogether.core.exceptions import AppError, AuthError
from todogether.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SyncSnapshot:
    """Result of one poll."""

    my_lists: list[TodoList] = field(default_factory=list)
    partner_lists: list[TodoList] = field(default_factory=list)


SyncCallback = Callable[[SyncSnapshot], Awaitable[None] | None]


class RealtimeSync:
    """Polls the backend every ``interval`` seconds until stopped.

    A failed poll or a failing callback is logged and the loop carries on
    with the next tick; losing the session ends the loop.
    """

    def __init__(self, todo_service: TodoService, interval: float = 5.0):
        self.todo_service = todo_service
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> SyncSnapshot:
        my_lists, partner_lists = await asyncio.gather(
            self.todo_service.list_todo_lists(),
            self.todo_service.list_partner_todo_lists(),
        )
        return SyncSnapshot(my_lists=my_lists, partner_lists=partner_lists)

    def start(self, callback: SyncCallback | None = None) -> None:
        """Start polling. Calling start while running restarts with the new callback."""
        self.stop()
        self._task = asyncio.create_task(self._run(callback))
        logger.info("sync_started", interval=self.interval)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("sync_stopped")

    async def _run(self, callback: SyncCallback | None) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                snapshot = await self.poll_once()
            except AuthError as e:
                logger.warning("sync_session_lost", error=e.message)
                return
            except AppError as e:
                logger.error("sync_poll_failed", error=e.message, code=e.code)
                continue
            except Exception as e:
                logger.error("sync_poll_failed", error=str(e), error_type=type(e).__name__)
                continue

            if callback is None:
                continue
            try:
                result = callback(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("sync_callback_failed", error=str(e), error_type=type(e).__name__)
