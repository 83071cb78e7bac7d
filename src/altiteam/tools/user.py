"""User profile tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool

from ._common import error_result, failure_result, format_user, optional_fields, require_user, text_result


@altiteam_tool(
    name="get_my_profile",
    description="Get the current user's profile",
)
async def get_my_profile(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    result = await context.repositories.users.find_by_id(context.user_id)
    if not result.success:
        return failure_result(result)
    if result.data is None:
        return error_result("User not found")
    return text_result(format_user(result.data))


@altiteam_tool(
    name="update_my_profile",
    description="Update the current user's name or bio",
    input_schema={
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Display name"},
            "bio": {"type": "string", "description": "Short bio"},
        },
    },
)
async def update_my_profile(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    changes = optional_fields(args, {"name": "name", "bio": "bio"})
    if not changes:
        return error_result("Nothing to update")

    result = await context.repositories.users.update(context.user_id, **changes)
    if not result.success:
        return failure_result(result)
    return text_result(format_user(result.data))
