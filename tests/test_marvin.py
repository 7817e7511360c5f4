"""Tests for the Marvin tool catalog and HTTP client."""

import httpx
import pytest

from conftest import RecordingTransport
from marvin.client import MarvinClient
from marvin.tools import CATALOG
from mcp_server.registry import ToolRegistry
from mcp_server.router import ToolRouter
from shared.errors import ToolValidationError
from shared.models import HTTPMethod, OutboundCall, TokenTier
from shared.schema import create_tool_schema


# name -> (minimal valid arguments, verb, path under the API base, tier)
EXPECTED_CALLS = {
    "createTask": ({"title": "Buy milk"}, "POST", "/addTask", TokenTier.API),
    "markTaskDone": ({"itemId": "t1"}, "POST", "/markDone", TokenTier.API),
    "createProject": ({"title": "Move house"}, "POST", "/addProject", TokenTier.API),
    "getTodayItems": ({}, "GET", "/todayItems", TokenTier.API),
    "getDueItems": ({}, "GET", "/dueItems", TokenTier.API),
    "getTodayTimeBlocks": ({}, "GET", "/todayTimeBlocks", TokenTier.API),
    "addEvent": (
        {"title": "Standup", "start": "2026-10-19T09:00:00Z"}, "POST", "/addEvent", TokenTier.API
    ),
    "getCategories": ({}, "GET", "/categories", TokenTier.API),
    "getLabels": ({}, "GET", "/labels", TokenTier.API),
    "getChildren": ({"parentId": "c1"}, "GET", "/children", TokenTier.API),
    "startTracking": ({"taskId": "t1"}, "POST", "/track", TokenTier.API),
    "stopTracking": ({"taskId": "t1"}, "POST", "/track", TokenTier.API),
    "getTrackedItem": ({}, "GET", "/trackedItem", TokenTier.API),
    "getTracks": ({"taskIds": ["t1", "t2"]}, "POST", "/tracks", TokenTier.API),
    "getReminders": ({}, "GET", "/reminders", TokenTier.API),
    "setReminder": (
        {"itemId": "t1", "remindAt": 1760860800000}, "POST", "/reminders", TokenTier.API
    ),
    "deleteReminder": ({"reminderId": "r1"}, "DELETE", "/reminders/r1", TokenTier.API),
    "deleteAllReminders": ({}, "POST", "/reminder/deleteAll", TokenTier.FULL_ACCESS),
    "recordHabit": ({"habitId": "h1"}, "POST", "/updateHabit", TokenTier.API),
    "undoHabit": ({"habitId": "h1"}, "POST", "/updateHabit", TokenTier.API),
    "getHabit": ({"id": "h1"}, "GET", "/habit", TokenTier.API),
    "listHabits": ({}, "GET", "/habits", TokenTier.API),
    "getMe": ({}, "GET", "/me", TokenTier.API),
    "getGoals": ({}, "GET", "/goals", TokenTier.API),
    "getKudos": ({}, "GET", "/kudos", TokenTier.API),
    "claimRewardPoints": (
        {"points": 5, "itemId": "MANUAL"}, "POST", "/claimRewardPoints", TokenTier.API
    ),
    "unclaimRewardPoints": ({"itemId": "t1"}, "POST", "/unclaimRewardPoints", TokenTier.API),
    "spendRewardPoints": ({"points": 3}, "POST", "/spendRewardPoints", TokenTier.API),
    "resetRewardPoints": ({}, "POST", "/resetRewardPoints", TokenTier.FULL_ACCESS),
    "updateDoc": (
        {"itemId": "d1", "setters": [{"key": "title", "val": "Renamed"}]},
        "POST",
        "/doc/update",
        TokenTier.FULL_ACCESS,
    ),
    "createDoc": (
        {"doc": {"db": "Tasks", "title": "Raw doc"}}, "POST", "/doc/create", TokenTier.FULL_ACCESS
    ),
    "deleteDoc": ({"itemId": "d1"}, "POST", "/doc/delete", TokenTier.FULL_ACCESS),
}

FULL_ACCESS_TOOLS = {
    "createDoc", "updateDoc", "deleteDoc", "deleteAllReminders", "resetRewardPoints",
}

# (tool, required field) for every required field in the catalog
REQUIRED_FIELDS = [
    (tool.name, field)
    for tool in CATALOG
    for field in tool.input_schema.get("required", [])
]


def make_router(marvin_settings, credentials, recorder: RecordingTransport) -> ToolRouter:
    client = MarvinClient(marvin_settings, transport=recorder.transport)
    return ToolRouter(ToolRegistry(CATALOG), client, credentials)


class TestCatalog:
    """Tests for the static tool table."""

    def test_catalog_covers_every_tool(self):
        """Test that the catalog and the expected call table agree."""
        assert {tool.name for tool in CATALOG} == set(EXPECTED_CALLS)
        assert len(CATALOG) == 32

    def test_names_are_unique(self):
        names = [tool.name for tool in CATALOG]
        assert len(names) == len(set(names))

    def test_full_access_tiers(self):
        """Test that only destructive document/admin tools need full access."""
        full_access = {t.name for t in CATALOG if t.tier == TokenTier.FULL_ACCESS}
        assert full_access == FULL_ACCESS_TOOLS

    def test_document_tools_warn_about_caution(self):
        for name in ("createDoc", "updateDoc", "deleteDoc"):
            tool = next(t for t in CATALOG if t.name == name)
            assert "Use with caution" in tool.description

    def test_schemas_are_objects(self):
        for tool in CATALOG:
            assert tool.input_schema["type"] == "object"
            assert isinstance(tool.input_schema["properties"], dict)

    def test_schema_types(self):
        """Test that parameter types map onto JSON Schema types."""
        schema = create_tool_schema([
            {"name": "title", "type": "string"},
            {"name": "points", "type": "number"},
            {"name": "ids", "type": "array", "items": {"type": "string"}, "optional": True},
            {"name": "doc", "type": "object"},
            {"name": "untyped"},
        ])

        types = {name: prop["type"] for name, prop in schema["properties"].items()}
        assert types == {
            "title": "string",
            "points": "number",
            "ids": "array",
            "doc": "object",
            "untyped": "string",
        }
        assert schema["required"] == ["title", "points", "doc", "untyped"]

    def test_get_today_items_omits_missing_date(self):
        """Test that an absent date leaves the query string empty."""
        tool = next(t for t in CATALOG if t.name == "getTodayItems")
        call = tool.build_request({})

        assert call.method == HTTPMethod.GET
        assert call.path == "/todayItems"
        assert call.params is None

    def test_create_doc_stamps_created_at(self):
        tool = next(t for t in CATALOG if t.name == "createDoc")
        call = tool.build_request({"doc": {"db": "Tasks", "title": "x"}})

        assert call.json_body["db"] == "Tasks"
        assert call.json_body["title"] == "x"
        assert isinstance(call.json_body["createdAt"], int)

    def test_delete_reminder_quotes_identifier(self):
        tool = next(t for t in CATALOG if t.name == "deleteReminder")
        call = tool.build_request({"reminderId": "a/b"})

        assert call.method == HTTPMethod.DELETE
        assert call.path == "/reminders/a%2Fb"


class TestToolDispatch:
    """Per-tool endpoint, verb and credential checks."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool_name", sorted(EXPECTED_CALLS))
    async def test_valid_call_hits_documented_endpoint(
        self, tool_name, marvin_settings, credentials, recorder
    ):
        """Test that a valid invocation makes exactly one call with the tier's header."""
        arguments, method, path, tier = EXPECTED_CALLS[tool_name]
        router = make_router(marvin_settings, credentials, recorder)

        await router.execute(tool_name, arguments)

        assert len(recorder.requests) == 1
        request = recorder.last
        assert request.method == method
        assert request.url.path == "/api" + path

        if tier == TokenTier.FULL_ACCESS:
            assert request.headers["X-Full-Access-Token"] == "full-secret"
            assert "X-API-Token" not in request.headers
        else:
            assert request.headers["X-API-Token"] == "api-secret"
            assert "X-Full-Access-Token" not in request.headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool_name,field", REQUIRED_FIELDS)
    async def test_missing_required_field_is_rejected(
        self, tool_name, field, marvin_settings, credentials, recorder
    ):
        """Test that dropping a required field fails validation with no outbound call."""
        arguments = dict(EXPECTED_CALLS[tool_name][0])
        del arguments[field]
        router = make_router(marvin_settings, credentials, recorder)

        with pytest.raises(ToolValidationError) as exc_info:
            await router.execute(tool_name, arguments)

        assert field in str(exc_info.value)
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_tracking_actions(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        await router.execute("startTracking", {"taskId": "t1"})
        assert recorder.last_json() == {"taskId": "t1", "action": "START"}

        await router.execute("stopTracking", {"taskId": "t1"})
        assert recorder.last_json() == {"taskId": "t1", "action": "STOP"}

    @pytest.mark.asyncio
    async def test_habit_bodies(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        await router.execute("recordHabit", {"habitId": "h1", "value": 2})
        assert recorder.last_json() == {"habitId": "h1", "value": 2, "updateDB": True}

        await router.execute("undoHabit", {"habitId": "h1"})
        assert recorder.last_json() == {"habitId": "h1", "undo": True, "updateDB": True}

    @pytest.mark.asyncio
    async def test_reward_point_operations(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        await router.execute("claimRewardPoints", {"points": 5, "itemId": "MANUAL"})
        assert recorder.last_json() == {"points": 5, "itemId": "MANUAL", "op": "CLAIM"}

        await router.execute("unclaimRewardPoints", {"itemId": "t1", "date": "2026-10-19"})
        assert recorder.last_json() == {"itemId": "t1", "date": "2026-10-19", "op": "UNCLAIM"}

        await router.execute("spendRewardPoints", {"points": 3})
        assert recorder.last_json() == {"points": 3, "op": "SPEND"}

        await router.execute("resetRewardPoints", {})
        assert recorder.last_json() == {}

    @pytest.mark.asyncio
    async def test_query_parameters(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        await router.execute("getDueItems", {"by": "2026-10-31"})
        assert recorder.last.url.params["by"] == "2026-10-31"

        await router.execute("getHabit", {"id": "h1"})
        assert recorder.last.url.params["id"] == "h1"

    @pytest.mark.asyncio
    async def test_invalid_date_is_rejected(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        with pytest.raises(ToolValidationError) as exc_info:
            await router.execute("getTodayItems", {"date": "tomorrow"})

        assert "date" in str(exc_info.value)
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_wrong_type_is_rejected(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        with pytest.raises(ToolValidationError) as exc_info:
            await router.execute("setReminder", {"itemId": "t1", "remindAt": "soon"})

        assert exc_info.value.errors[0].startswith("remindAt:")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_update_doc_setters_carry_only_key_and_val(
        self, marvin_settings, credentials, recorder
    ):
        """Test that undeclared fields inside each setter are not forwarded."""
        router = make_router(marvin_settings, credentials, recorder)

        await router.execute("updateDoc", {
            "itemId": "d1",
            "setters": [
                {"key": "title", "val": 1, "db": "Other"},
                {"key": "done", "owner": "someone"},
            ],
            "extra": True,
        })

        assert recorder.last_json() == {
            "itemId": "d1",
            "setters": [{"key": "title", "val": 1}, {"key": "done"}],
        }

    @pytest.mark.asyncio
    async def test_create_doc_requires_db(self, marvin_settings, credentials, recorder):
        router = make_router(marvin_settings, credentials, recorder)

        with pytest.raises(ToolValidationError):
            await router.execute("createDoc", {"doc": {"title": "no db"}})

        assert recorder.requests == []


class TestMarvinClient:
    """Tests for the outbound HTTP client."""

    @pytest.mark.asyncio
    async def test_sends_single_credential_header(self, marvin_settings, credentials, recorder):
        client = MarvinClient(marvin_settings, transport=recorder.transport)
        call = OutboundCall(method=HTTPMethod.GET, path="/me", tier=TokenTier.API)

        body = await client.send(call, credentials)
        await client.close()

        assert body == {"ok": True}
        assert recorder.last.headers["X-API-Token"] == "api-secret"
        assert "X-Full-Access-Token" not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_non_json_body_returned_as_text(self, marvin_settings, credentials):
        recorder = RecordingTransport(text="OK")
        client = MarvinClient(marvin_settings, transport=recorder.transport)
        call = OutboundCall(method=HTTPMethod.POST, path="/markDone", json_body={"itemId": "t1"})

        body = await client.send(call, credentials)

        assert body == "OK"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, marvin_settings, credentials):
        recorder = RecordingTransport(status_code=403, text="Forbidden")
        client = MarvinClient(marvin_settings, transport=recorder.transport)
        call = OutboundCall(method=HTTPMethod.GET, path="/me")

        with pytest.raises(httpx.HTTPStatusError):
            await client.send(call, credentials)

        assert len(recorder.requests) == 1
