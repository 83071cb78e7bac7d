"""Department tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool

from ._common import error_result, failure_result, format_department, require_user, text_result


@altiteam_tool(
    name="create_department",
    description="Create a department. organizationId defaults to the user's first organization.",
    input_schema={
        "type": "object",
        "properties": {
            "organizationId": {"type": "string", "description": "Organization ID"},
            "name": {"type": "string", "minLength": 1, "description": "Department name"},
            "description": {"type": "string", "description": "Department description"},
            "parentId": {"type": "string", "description": "Parent department ID"},
        },
        "required": ["name"],
    },
)
async def create_department(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    parent_id = args.get("parentId")
    if parent_id:
        parent = await context.repositories.departments.find_by_id(parent_id)
        if not parent.success:
            return failure_result(parent)
        if parent.data is None or parent.data.organization_id != org.data:
            return error_result("Parent department not found in this organization")

    result = await context.repositories.departments.create(
        name=args["name"],
        organization_id=org.data,
        description=args.get("description"),
        parent_id=parent_id,
    )
    if not result.success:
        return failure_result(result)
    return text_result(format_department(result.data))


@altiteam_tool(
    name="list_departments",
    description="List departments in an organization (defaults to the user's first organization)",
    input_schema={
        "type": "object",
        "properties": {"organizationId": {"type": "string", "description": "Organization ID"}},
    },
)
async def list_departments(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    result = await context.repositories.departments.find_all(lambda d: d.organization_id == org.data)
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result("No departments found.")
    return text_result("\n\n".join(format_department(d) for d in result.data))
