"""Tests for todo list and item operations."""

import json

import pytest
from conftest import reply

from todogether.api.schemas import (
    ItemStatus,
    Severity,
    TodoItem,
    TodoList,
    api_status_to_frontend,
    build_item_update,
    priority_to_severity,
    severity_to_priority,
    status_to_api,
)
from todogether.api.todos import TodoService
from todogether.core.exceptions import AppError, AuthenticationFailedError


@pytest.fixture
def todo_service(gateway, test_config) -> TodoService:
    return TodoService(gateway, test_config.endpoints)


class TestConversions:
    """Test cases for UI to backend field conversion."""

    @pytest.mark.parametrize(
        "priority,expected",
        [
            ("low", Severity.LOW),
            ("medium", Severity.MEDIUM),
            ("high", Severity.HIGH),
            ("urgent", Severity.HIGH),
            ("HIGH", Severity.HIGH),
            ("whatever", Severity.MEDIUM),
            (None, Severity.MEDIUM),
        ],
    )
    def test_priority_to_severity(self, priority, expected):
        assert priority_to_severity(priority) is expected

    def test_severity_to_priority(self):
        assert severity_to_priority(0) == "low"
        assert severity_to_priority(2) == "high"
        assert severity_to_priority(None) == "medium"

    def test_status_mapping(self):
        assert status_to_api("completed") is ItemStatus.COMPLETED
        assert status_to_api("in-progress") is ItemStatus.PENDING
        assert status_to_api("cancelled") is ItemStatus.PENDING
        assert api_status_to_frontend(1) == "completed"
        assert api_status_to_frontend(None) == "pending"

    def test_build_item_update_only_sends_given_fields(self):
        payload = build_item_update({"priority": "urgent", "status": "completed"})
        assert payload == {"severity": 2, "status": 1}

    def test_build_item_update_passes_text_fields(self):
        payload = build_item_update({"title": "Milk", "description": None, "order": 3})
        assert payload == {"title": "Milk", "description": None, "order": 3}

    def test_item_model_exposes_ui_fields(self):
        item = TodoItem.model_validate({"id": 1, "title": "Milk", "severity": 2, "status": 1})
        assert item.priority == "high"
        assert item.is_completed is True


class TestTodoService:
    """Test cases for TodoService."""

    @pytest.mark.asyncio
    async def test_list_todo_lists(self, todo_service, backend, logged_in):
        home = {"id": 1, "title": "Home", "ownerId": 7}
        backend.add("GET", "/todolists", reply(200, json=[home]))

        lists = await todo_service.list_todo_lists()

        assert lists == [TodoList(id=1, title="Home", owner_id=7)]

    @pytest.mark.asyncio
    async def test_partner_lists(self, todo_service, backend, logged_in):
        backend.add("GET", "/todolists/partner", reply(200, json=[{"id": 5, "title": "Gym"}]))

        lists = await todo_service.list_partner_todo_lists()

        assert [todo_list.title for todo_list in lists] == ["Gym"]

    @pytest.mark.asyncio
    async def test_partner_overview(self, todo_service, backend, logged_in):
        backend.add(
            "GET",
            "/partner/overview",
            reply(200, json={"id": 8, "username": "bob", "todoLists": [{"id": 5, "title": "Gym"}]}),
        )

        overview = await todo_service.get_partner_overview()

        assert overview.username == "bob"
        assert overview.todo_lists[0].id == 5

    @pytest.mark.asyncio
    async def test_partner_overview_without_partner(self, todo_service, backend, logged_in):
        backend.add("GET", "/partner/overview", reply(404, json={"message": "No partner"}))

        assert await todo_service.get_partner_overview() is None

    @pytest.mark.asyncio
    async def test_create_todo_list_empty_body(self, todo_service, backend, logged_in):
        backend.add("POST", "/todolists", reply(201))

        with pytest.raises(AppError) as exc_info:
            await todo_service.create_todo_list("Trip")

        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_create_todo_list(self, todo_service, backend, logged_in):
        backend.add("POST", "/todolists", reply(201, json={"id": 3, "title": "Trip"}))

        created = await todo_service.create_todo_list("Trip", "Summer")

        assert created.id == 3
        sent = json.loads(backend.requests[0].content)
        assert sent == {"title": "Trip", "description": "Summer"}

    @pytest.mark.asyncio
    async def test_update_and_delete_todo_list(self, todo_service, backend, logged_in):
        backend.add("PUT", "/todolists/3", reply(200, json={"id": 3, "title": "Road trip"}))
        backend.add("DELETE", "/todolists/3", reply(204))

        updated = await todo_service.update_todo_list(3, {"title": "Road trip"})
        await todo_service.delete_todo_list(3)

        assert updated.title == "Road trip"
        assert [r.method for r in backend.requests] == ["PUT", "DELETE"]

    @pytest.mark.asyncio
    async def test_add_item_sends_severity(self, todo_service, backend, logged_in):
        backend.add(
            "POST",
            "/todolists/1/items",
            reply(201, json={"id": 10, "title": "Milk", "severity": 2, "status": 0}),
        )

        item = await todo_service.add_item(1, "Milk", priority="urgent")

        assert item.priority == "high"
        sent = json.loads(backend.requests[0].content)
        assert sent == {"title": "Milk", "description": None, "severity": 2}

    @pytest.mark.asyncio
    async def test_update_item_converts_fields(self, todo_service, backend, logged_in):
        backend.add(
            "PUT",
            "/todolists/1/items/10",
            reply(200, json={"id": 10, "title": "Milk", "status": 1}),
        )

        item = await todo_service.update_item(1, 10, {"status": "completed"})

        assert item.is_completed is True
        assert json.loads(backend.requests[0].content) == {"status": 1}

    @pytest.mark.asyncio
    async def test_delete_item(self, todo_service, backend, logged_in):
        backend.add("DELETE", "/todolists/1/items/10", reply(204))

        assert await todo_service.delete_item(1, 10) is None

    @pytest.mark.asyncio
    async def test_load_all_items_tags_and_skips_failures(self, todo_service, backend, logged_in):
        backend.add("GET", "/todolists/1/items", reply(200, json=[{"id": 10, "title": "Milk"}]))
        backend.add("GET", "/todolists/2/items", reply(403, json={}))
        lists = [TodoList(id=1, owner_id=7), TodoList(id=2, owner_id=8)]

        items = await todo_service.load_all_items(lists)

        assert len(items) == 1
        assert items[0].todo_list_id == 1
        assert items[0].owner_id == 7

    @pytest.mark.asyncio
    async def test_load_all_items_propagates_lost_session(self, todo_service, backend, logged_in):
        backend.add("GET", "/todolists/1/items", reply(401))
        backend.add("POST", "/auth/refresh", reply(401))

        with pytest.raises(AuthenticationFailedError):
            await todo_service.load_all_items([TodoList(id=1)])

    @pytest.mark.asyncio
    async def test_check_health(self, todo_service, backend):
        backend.add("GET", "/", reply(200, json={"status": "ok"}), reply(404))

        assert await todo_service.check_health() is True
        assert await todo_service.check_health() is False
