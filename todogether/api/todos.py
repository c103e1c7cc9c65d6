"""Todo list and todo item operations over the request gateway."""

from typing import Any

from todogether.api.gateway import RequestGateway
from todogether.api.schemas import (
    PartnerOverview,
    TodoItem,
    TodoList,
    build_item_update,
    priority_to_severity,
)
from todogether.core.config import ApiEndpoints
from todogether.core.exceptions import ApiError, AppError, AuthError
from todogether.core.logging import get_logger

logger = get_logger(__name__)


class TodoService:
    """Data operations behind the dashboard and the list detail view."""

    def __init__(self, gateway: RequestGateway, endpoints: ApiEndpoints):
        self.gateway = gateway
        self.endpoints = endpoints

    # --- Todo lists ---

    async def list_todo_lists(self) -> list[TodoList]:
        data = await self.gateway.get(self.endpoints.todo_lists)
        return [TodoList.model_validate(item) for item in data or []]

    async def list_partner_todo_lists(self) -> list[TodoList]:
        data = await self.gateway.get(self.endpoints.partner_todo_lists)
        return [TodoList.model_validate(item) for item in data or []]

    async def get_partner_overview(self) -> PartnerOverview | None:
        """Partner profile and lists, or None when the user has no partner yet."""
        try:
            data = await self.gateway.get(self.endpoints.partner_overview)
        except ApiError as e:
            logger.info("partner_overview_unavailable", status_code=e.status_code)
            return None
        if not data:
            return None
        return PartnerOverview.model_validate(data)

    async def create_todo_list(self, title: str, description: str | None = None) -> TodoList:
        data = await self.gateway.post(
            self.endpoints.todo_lists, {"title": title, "description": description}
        )
        if not data:
            raise AppError("Create todo list returned no body", code="INVALID_RESPONSE")
        todo_list = TodoList.model_validate(data)
        logger.info("todo_list_created", todo_list_id=todo_list.id)
        return todo_list

    async def update_todo_list(self, todo_list_id: int | str, updates: dict[str, Any]) -> TodoList:
        data = await self.gateway.put(self.endpoints.todo_list(todo_list_id), updates)
        return TodoList.model_validate(data)

    async def delete_todo_list(self, todo_list_id: int | str) -> None:
        await self.gateway.delete(self.endpoints.todo_list(todo_list_id))
        logger.info("todo_list_deleted", todo_list_id=todo_list_id)

    # --- Todo items ---

    async def list_items(self, todo_list_id: int | str) -> list[TodoItem]:
        data = await self.gateway.get(self.endpoints.todo_items(todo_list_id))
        return [TodoItem.model_validate(item) for item in data or []]

    async def load_all_items(self, todo_lists: list[TodoList]) -> list[TodoItem]:
        """Items of every given list, tagged with their list and owner.

        A list whose items cannot be loaded is skipped. Losing the session
        still propagates.
        """
        items: list[TodoItem] = []
        for todo_list in todo_lists:
            try:
                list_items = await self.list_items(todo_list.id)
            except AuthError:
                raise
            except AppError as e:
                logger.warning("todo_items_load_failed", todo_list_id=todo_list.id, error=e.message)
                continue
            for item in list_items:
                item.todo_list_id = todo_list.id
                item.owner_id = todo_list.owner_id
            items.extend(list_items)
        logger.debug("todo_items_loaded", count=len(items), lists=len(todo_lists))
        return items

    async def add_item(
        self,
        todo_list_id: int | str,
        title: str,
        description: str | None = None,
        priority: str = "medium",
    ) -> TodoItem:
        body = {
            "title": title,
            "description": description or None,
            "severity": int(priority_to_severity(priority)),
        }
        data = await self.gateway.post(self.endpoints.todo_items(todo_list_id), body)
        return TodoItem.model_validate(data)

    async def update_item(
        self, todo_list_id: int | str, item_id: int | str, updates: dict[str, Any]
    ) -> TodoItem:
        """Apply a UI-side partial update (title, description, priority, status, order)."""
        data = await self.gateway.put(
            self.endpoints.todo_item(todo_list_id, item_id), build_item_update(updates)
        )
        return TodoItem.model_validate(data)

    async def delete_item(self, todo_list_id: int | str, item_id: int | str) -> None:
        await self.gateway.delete(self.endpoints.todo_item(todo_list_id, item_id))

    # --- Health ---

    async def check_health(self) -> bool:
        """True if the backend answers on its root URL."""
        try:
            await self.gateway.get(self.endpoints.health)
        except AppError as e:
            logger.warning("api_unavailable", error=e.message)
            return False
        return True
