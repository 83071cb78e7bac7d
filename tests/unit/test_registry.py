"""Unit tests for the tool registry and argument validation."""
from unittest.mock import AsyncMock

import pytest
from mcp.types import CallToolResult, TextContent

from altiteam.core.exceptions import ToolNotFoundError, ToolValidationError
from altiteam.core.registry import (
    altiteam_tool,
    call_tool,
    extract_text,
    get_all_tool_schemas,
    get_tool,
    get_tool_registry,
    list_tools,
    validate_tool_args,
)

SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "count": {"type": "integer"},
    },
    "required": ["name"],
}


@pytest.fixture
def temp_tool():
    """Register a throwaway tool and remove it afterwards."""
    handler = AsyncMock(return_value=CallToolResult(content=[TextContent(type="text", text="ok")]))

    async def echo(args, context):
        return await handler(args, context)

    altiteam_tool(name="test_echo", description="Echo for tests", input_schema=SCHEMA)(echo)
    yield handler
    get_tool_registry().pop("test_echo", None)


class TestRegistration:
    """Tests for the @altiteam_tool decorator."""

    def test_registers_entry(self, temp_tool):
        entry = get_tool("test_echo")
        assert entry is not None
        assert entry.description == "Echo for tests"
        assert entry.input_schema == SCHEMA

    def test_rejects_sync_handler(self):
        with pytest.raises(TypeError):
            @altiteam_tool(name="test_sync", description="sync")
            def sync_tool(args, context):
                return None
        assert get_tool("test_sync") is None

    def test_rejects_invalid_schema(self):
        with pytest.raises(ValueError):
            altiteam_tool(name="test_bad", description="bad", input_schema={"type": "not-a-type"})

    def test_provider_schema_shape(self, temp_tool):
        schema = next(s for s in get_all_tool_schemas() if s["name"] == "test_echo")
        assert schema == {
            "name": "test_echo",
            "description": "Echo for tests",
            "input_schema": {"type": "object", "properties": SCHEMA["properties"], "required": ["name"]},
        }

    def test_list_tools_returns_mcp_tools(self, temp_tool):
        tool = next(t for t in list_tools() if t.name == "test_echo")
        assert tool.inputSchema == SCHEMA

    def test_domain_tools_loaded(self):
        """The tool modules register the guided-workflow create tools."""
        names = set(get_tool_registry())
        for name in ("create_project", "create_task", "create_team", "create_department",
                     "create_organization", "get_my_tasks", "invite_member", "get_my_profile"):
            assert name in names


class TestValidation:
    """Tests for schema validation before dispatch."""

    def test_valid_args(self, temp_tool):
        validate_tool_args("test_echo", {"name": "x", "count": 2})

    def test_unknown_tool(self):
        with pytest.raises(ToolNotFoundError) as exc_info:
            validate_tool_args("nope", {})
        assert "nope" in str(exc_info.value)

    def test_collects_all_errors(self, temp_tool):
        with pytest.raises(ToolValidationError) as exc_info:
            validate_tool_args("test_echo", {"name": "", "count": "two"})
        assert len(exc_info.value.errors) == 2
        assert "test_echo" in str(exc_info.value)

    def test_missing_required(self, temp_tool):
        with pytest.raises(ToolValidationError, match="'name' is a required property"):
            validate_tool_args("test_echo", {})


class TestCallTool:
    """Tests for call_tool dispatch."""

    async def test_calls_handler(self, temp_tool, tool_context):
        result = await call_tool("test_echo", {"name": "x"}, tool_context)
        assert extract_text(result) == "ok"
        temp_tool.assert_awaited_once_with({"name": "x"}, tool_context)

    async def test_invalid_args_skip_handler(self, temp_tool, tool_context):
        with pytest.raises(ToolValidationError):
            await call_tool("test_echo", {"count": 1}, tool_context)
        temp_tool.assert_not_awaited()

    async def test_unknown_tool(self, tool_context):
        with pytest.raises(ToolNotFoundError):
            await call_tool("does_not_exist", {}, tool_context)


class TestExtractText:
    def test_joins_text_blocks(self):
        result = CallToolResult(content=[
            TextContent(type="text", text="first"),
            TextContent(type="text", text="second"),
        ])
        assert extract_text(result) == "first\nsecond"

    def test_empty(self):
        assert extract_text(CallToolResult(content=[])) == ""
