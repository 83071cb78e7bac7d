"""
AltiTeam Tool Registry

Provides decorator-based registration for MCP-style tools. Each tool declares
its JSON input schema up front; the registry exposes the schemas to the model
and dispatches calls to the handlers.

Usage:
    from altiteam.core.registry import altiteam_tool, ToolContext

    @altiteam_tool(
        name="get_project",
        description="Get project details",
        input_schema={
            "type": "object",
            "properties": {"projectId": {"type": "string"}},
            "required": ["projectId"],
        },
    )
    async def get_project(args: dict, context: ToolContext) -> CallToolResult:
        ...
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from mcp.types import CallToolResult, Tool

from .exceptions import ToolNotFoundError, ToolValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# Registry Data Structures
# =============================================================================

@dataclass
class ToolContext:
    """Shared request context handed to every tool handler."""
    user_id: Optional[str]
    repositories: Any


ToolHandler = Callable[[Dict[str, Any], ToolContext], Awaitable[CallToolResult]]


@dataclass
class ToolEntry:
    """Registered tool entry."""
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: ToolHandler

    def to_mcp_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)

    def to_provider_schema(self) -> Dict[str, Any]:
        """Schema in the shape the model provider expects."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": self.input_schema.get("properties", {}),
                "required": self.input_schema.get("required", []),
            },
        }


# Global registry
_TOOL_REGISTRY: Dict[str, ToolEntry] = {}


# =============================================================================
# Decorator
# =============================================================================

def altiteam_tool(
    name: str,
    description: str,
    input_schema: Optional[Dict[str, Any]] = None,
) -> Callable[[ToolHandler], ToolHandler]:
    """Decorator to register an async handler as a tool.

    Args:
        name: Tool name the model uses to call it
        description: Description shown to the model
        input_schema: JSON schema for the tool arguments (object schema)

    Returns:
        Decorator function that registers and returns the handler unchanged
    """
    schema = input_schema or {"type": "object", "properties": {}, "required": []}

    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as e:
        raise ValueError(f"Invalid input schema for tool '{name}': {e.message}") from e

    def decorator(func: ToolHandler) -> ToolHandler:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Tool handler '{name}' must be an async function")

        if name in _TOOL_REGISTRY:
            logger.warning(f"Tool '{name}' already registered, overwriting")

        _TOOL_REGISTRY[name] = ToolEntry(
            name=name,
            description=description,
            input_schema=schema,
            handler=func,
        )
        return func

    return decorator


# =============================================================================
# Registry Access Functions
# =============================================================================

def get_tool_registry() -> Dict[str, ToolEntry]:
    """Get the global tool registry."""
    return _TOOL_REGISTRY


def get_tool(name: str) -> Optional[ToolEntry]:
    """Get a specific tool by name, or None."""
    return _TOOL_REGISTRY.get(name)


def list_tools() -> List[Tool]:
    """List all registered tools as MCP tool definitions."""
    return [entry.to_mcp_tool() for entry in _TOOL_REGISTRY.values()]


def get_all_tool_schemas() -> List[Dict[str, Any]]:
    """Get provider-ready schemas for all registered tools."""
    return [entry.to_provider_schema() for entry in _TOOL_REGISTRY.values()]


def validate_tool_args(name: str, args: Dict[str, Any]) -> None:
    """Validate arguments against the tool's advertised input schema.

    Raises:
        ToolNotFoundError: If the tool is not registered
        ToolValidationError: If the arguments do not conform to the schema
    """
    entry = _TOOL_REGISTRY.get(name)
    if entry is None:
        raise ToolNotFoundError(name)

    validator = Draft202012Validator(entry.input_schema)
    errors = sorted(validator.iter_errors(args), key=lambda e: list(e.path))
    if errors:
        raise ToolValidationError(name, [e.message for e in errors])


async def call_tool(name: str, args: Dict[str, Any], context: ToolContext) -> CallToolResult:
    """Validate and execute a registered tool by name.

    Args:
        name: Tool name
        args: Arguments to pass to the tool
        context: Shared request context

    Returns:
        The handler's CallToolResult

    Raises:
        ToolNotFoundError: If tool not found
        ToolValidationError: If args violate the input schema
        Exception: Any exception raised by the handler
    """
    validate_tool_args(name, args)
    entry = _TOOL_REGISTRY[name]
    return await entry.handler(args, context)


def extract_text(result: CallToolResult) -> str:
    """Concatenate all text-typed content blocks of a tool result."""
    return "\n".join(
        block.text for block in result.content
        if getattr(block, "type", None) == "text" and getattr(block, "text", None)
    )
