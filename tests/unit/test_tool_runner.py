"""Unit tests for concurrent tool execution."""
import asyncio

import pytest
from mcp.types import CallToolResult, TextContent

from altiteam.core.registry import altiteam_tool, get_tool_registry
from altiteam.services.chat.tool_runner import ToolCall, ToolRunner

TEMP_TOOLS = ("test_ok", "test_slow", "test_boom", "test_flagged", "test_malformed")


@pytest.fixture
def temp_tools():
    """Register tools with known behaviours, removed after the test."""

    @altiteam_tool(
        name="test_ok",
        description="Returns its input",
        input_schema={"type": "object", "properties": {"value": {"type": "string"}}, "required": ["value"]},
    )
    async def ok(args, context):
        await asyncio.sleep(0.01)
        return CallToolResult(content=[TextContent(type="text", text=f"value={args['value']}")])

    @altiteam_tool(name="test_slow", description="Never finishes in time")
    async def slow(args, context):
        await asyncio.sleep(10)
        return CallToolResult(content=[TextContent(type="text", text="late")])

    @altiteam_tool(name="test_boom", description="Raises")
    async def boom(args, context):
        raise RuntimeError("kaboom")

    @altiteam_tool(name="test_flagged", description="Returns an error result")
    async def flagged(args, context):
        return CallToolResult(content=[TextContent(type="text", text="Project not found")], isError=True)

    @altiteam_tool(name="test_malformed", description="Returns something that is not a tool result")
    async def malformed(args, context):
        return {"text": "not a CallToolResult"}

    yield
    for name in TEMP_TOOLS:
        get_tool_registry().pop(name, None)


@pytest.fixture
def runner():
    return ToolRunner(timeout_seconds=0.2)


class TestRunTool:
    """Single-call behaviour."""

    async def test_success(self, temp_tools, runner, tool_context):
        result = await runner.run_tool(ToolCall("test_ok", {"value": "a"}), tool_context)
        assert (result.tool_name, result.content, result.is_error) == ("test_ok", "value=a", False)

    async def test_error_result_is_data(self, temp_tools, runner, tool_context):
        result = await runner.run_tool(ToolCall("test_flagged"), tool_context)
        assert result.is_error
        assert result.content == "Project not found"

    async def test_unknown_tool(self, runner, tool_context):
        result = await runner.run_tool(ToolCall("no_such_tool"), tool_context)
        assert result.is_error
        assert "Unknown tool 'no_such_tool'" in result.content

    async def test_validation_error(self, temp_tools, runner, tool_context):
        result = await runner.run_tool(ToolCall("test_ok", {"value": 3}), tool_context)
        assert result.is_error
        assert "Invalid arguments for 'test_ok'" in result.content

    async def test_timeout(self, temp_tools, runner, tool_context):
        result = await runner.run_tool(ToolCall("test_slow"), tool_context)
        assert result.is_error
        assert "timed out" in result.content

    def test_default_timeout_from_config(self, test_config):
        assert ToolRunner().timeout_seconds == test_config.chat.tool_timeout_seconds


class TestRunTools:
    """Batch behaviour."""

    async def test_batch_independence_and_order(self, temp_tools, runner, tool_context):
        calls = [
            ToolCall("test_ok", {"value": "first"}),
            ToolCall("test_boom"),
            ToolCall("test_slow"),
            ToolCall("no_such_tool"),
            ToolCall("test_ok", {"value": "last"}),
        ]
        results = await runner.run_tools(calls, tool_context)

        assert [r.tool_name for r in results] == [c.name for c in calls]
        assert results[0].content == "value=first" and not results[0].is_error
        assert results[1].is_error and "kaboom" in results[1].content
        assert results[2].is_error and "timed out" in results[2].content
        assert results[3].is_error
        assert results[4].content == "value=last" and not results[4].is_error

    async def test_runs_concurrently(self, temp_tools, tool_context):
        runner = ToolRunner(timeout_seconds=0.5)
        calls = [ToolCall("test_ok", {"value": str(i)}) for i in range(20)]

        loop = asyncio.get_running_loop()
        started = loop.time()
        results = await runner.run_tools(calls, tool_context)

        assert len(results) == 20
        assert loop.time() - started < 0.15

    async def test_empty_batch(self, runner, tool_context):
        assert await runner.run_tools([], tool_context) == []

    def test_labeled(self):
        from altiteam.services.chat.tool_runner import ToolRunResult

        assert ToolRunResult("get_my_tasks", "- a\n- b").labeled() == "[get_my_tasks]\n- a\n- b"

    async def test_unreadable_result_does_not_abort_batch(self, temp_tools, runner, tool_context):
        calls = [
            ToolCall("test_ok", {"value": "a"}),
            ToolCall("test_malformed"),
            ToolCall("test_ok", {"value": "b"}),
        ]
        results = await runner.run_tools(calls, tool_context)

        assert [r.tool_name for r in results] == ["test_ok", "test_malformed", "test_ok"]
        assert [r.content for r in (results[0], results[2])] == ["value=a", "value=b"]
        assert results[1].is_error
        assert results[1].content.startswith("Error executing test_malformed")
