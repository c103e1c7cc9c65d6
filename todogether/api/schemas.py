"""Todo list and todo item schemas."""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Severity(IntEnum):
    """Item severity as stored by the backend."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


class ItemStatus(IntEnum):
    """Item status as stored by the backend."""

    PENDING = 0
    COMPLETED = 1


# The desktop UI speaks in priorities and richer statuses; the backend only
# knows three severities and two statuses.
PRIORITY_TO_SEVERITY: dict[str, Severity] = {
    "low": Severity.LOW,
    "medium": Severity.MEDIUM,
    "high": Severity.HIGH,
    "urgent": Severity.HIGH,
}

SEVERITY_TO_PRIORITY: dict[int, str] = {
    Severity.LOW: "low",
    Severity.MEDIUM: "medium",
    Severity.HIGH: "high",
}

STATUS_TO_API: dict[str, ItemStatus] = {
    "pending": ItemStatus.PENDING,
    "in-progress": ItemStatus.PENDING,
    "completed": ItemStatus.COMPLETED,
    "cancelled": ItemStatus.PENDING,
}

API_TO_STATUS: dict[int, str] = {
    ItemStatus.PENDING: "pending",
    ItemStatus.COMPLETED: "completed",
}


def priority_to_severity(priority: str | None) -> Severity:
    """Map a UI priority to a backend severity. Unknown values map to MEDIUM."""
    return PRIORITY_TO_SEVERITY.get((priority or "").lower(), Severity.MEDIUM)


def severity_to_priority(severity: int | None) -> str:
    return SEVERITY_TO_PRIORITY.get(severity, "medium") if severity is not None else "medium"


def status_to_api(status: str | None) -> ItemStatus:
    """Map a UI status to a backend status. Unknown values map to PENDING."""
    return STATUS_TO_API.get((status or "").lower(), ItemStatus.PENDING)


def api_status_to_frontend(status: int | None) -> str:
    return API_TO_STATUS.get(status, "pending") if status is not None else "pending"


def build_item_update(updates: dict[str, Any]) -> dict[str, Any]:
    """Translate a UI-side partial update into the backend's item payload.

    Only keys present in ``updates`` are sent; ``priority`` becomes
    ``severity`` and ``status`` is converted to its numeric form.
    """
    payload: dict[str, Any] = {}
    if "title" in updates:
        payload["title"] = updates["title"]
    if "description" in updates:
        payload["description"] = updates["description"]
    if "priority" in updates:
        payload["severity"] = int(priority_to_severity(updates["priority"]))
    if "severity" in updates and "priority" not in updates:
        payload["severity"] = int(updates["severity"])
    if "status" in updates:
        status = updates["status"]
        payload["status"] = int(status) if isinstance(status, int) else int(status_to_api(status))
    if "order" in updates:
        payload["order"] = updates["order"]
    return payload


class TodoList(BaseModel):
    """A todo list owned by one of the partners."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str
    title: str | None = None
    description: str | None = None
    owner_id: int | str | None = Field(default=None, alias="ownerId")


class TodoItem(BaseModel):
    """One entry of a todo list."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str
    title: str
    description: str | None = None
    severity: Severity = Severity.MEDIUM
    status: ItemStatus = ItemStatus.PENDING
    order: int | None = None
    todo_list_id: int | str | None = Field(default=None, alias="todoListId")
    owner_id: int | str | None = Field(default=None, alias="ownerId")

    @property
    def priority(self) -> str:
        return severity_to_priority(self.severity)

    @property
    def is_completed(self) -> bool:
        return self.status is ItemStatus.COMPLETED


class PartnerOverview(BaseModel):
    """Partner profile plus the partner's todo lists."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str | None = None
    username: str | None = None
    color_code: str | None = Field(default=None, alias="colorCode")
    todo_lists: list[TodoList] = Field(default_factory=list, alias="todoLists")
