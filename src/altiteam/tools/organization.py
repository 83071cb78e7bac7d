"""Organization tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool

from ._common import (
    error_result,
    failure_result,
    format_organization,
    optional_fields,
    require_access,
    require_user,
    text_result,
)


@altiteam_tool(
    name="create_organization",
    description="Create a new organization owned by the current user",
    input_schema={
        "type": "object",
        "properties": {
            "name": {"type": "string", "minLength": 1, "description": "Organization name"},
            "description": {"type": "string", "description": "Organization description"},
        },
        "required": ["name"],
    },
)
async def create_organization(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    result = await context.repositories.create_organization(
        owner_id=context.user_id,
        name=args["name"],
        description=args.get("description"),
    )
    if not result.success:
        return failure_result(result)
    return text_result(format_organization(result.data))


@altiteam_tool(
    name="get_organization",
    description="Get organization details",
    input_schema={
        "type": "object",
        "properties": {"organizationId": {"type": "string", "description": "Organization ID"}},
        "required": ["organizationId"],
    },
)
async def get_organization(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied
    denied = await require_access(context, args["organizationId"])
    if denied:
        return denied

    result = await context.repositories.organizations.find_by_id(args["organizationId"])
    if not result.success:
        return failure_result(result)
    if result.data is None:
        return error_result("Organization not found")
    return text_result(format_organization(result.data))


@altiteam_tool(
    name="list_my_organizations",
    description="List organizations the current user belongs to",
)
async def list_my_organizations(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    result = await context.repositories.organizations_for_user(context.user_id)
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result("You don't belong to any organizations yet.")
    return text_result("\n\n".join(format_organization(org) for org in result.data))


@altiteam_tool(
    name="update_organization",
    description="Update organization information",
    input_schema={
        "type": "object",
        "properties": {
            "organizationId": {"type": "string", "description": "Organization ID"},
            "name": {"type": "string", "minLength": 1, "description": "Organization name"},
            "description": {"type": "string", "description": "Organization description"},
        },
        "required": ["organizationId"],
    },
)
async def update_organization(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied
    denied = await require_access(context, args["organizationId"])
    if denied:
        return denied

    changes = optional_fields(args, {"name": "name", "description": "description"})
    if not changes:
        return error_result("Nothing to update")

    result = await context.repositories.organizations.update(args["organizationId"], **changes)
    if not result.success:
        return failure_result(result)
    return text_result(format_organization(result.data))
