"""Project CRUD tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool
from altiteam.repositories.models import ProjectStatus

from ._common import (
    error_result,
    failure_result,
    format_project,
    optional_fields,
    require_access,
    require_user,
    text_result,
)

PROJECT_STATUSES = [status.value for status in ProjectStatus]

PROJECT_FIELDS = {
    "name": "name",
    "description": "description",
    "startDate": "start_date",
    "endDate": "end_date",
}


async def _load_project(args: dict, context: ToolContext):
    """Fetch a project and check access; returns (project, error_result)."""
    result = await context.repositories.projects.find_by_id(args["projectId"])
    if not result.success:
        return None, failure_result(result)
    if result.data is None:
        return None, error_result("Project not found")

    denied = await require_access(context, result.data.organization_id)
    if denied:
        return None, error_result("Access denied: User does not have access to this project")
    return result.data, None


@altiteam_tool(
    name="create_project",
    description=(
        "Create a new project. organizationId defaults to the user's first "
        "organization when omitted."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "organizationId": {"type": "string", "description": "Organization ID"},
            "name": {"type": "string", "minLength": 1, "description": "Project name"},
            "description": {"type": "string", "description": "Project description"},
            "startDate": {"type": "string", "description": "Project start date (ISO format)"},
            "endDate": {"type": "string", "description": "Project end date (ISO format)"},
            "status": {"type": "string", "description": "Project status", "enum": PROJECT_STATUSES},
        },
        "required": ["name"],
    },
)
async def create_project(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    data = optional_fields(args, PROJECT_FIELDS)
    data.setdefault("description", "")
    result = await context.repositories.projects.create(
        organization_id=org.data,
        status=ProjectStatus(args.get("status", ProjectStatus.PLANNING.value)),
        **data,
    )
    if not result.success:
        return failure_result(result)
    return text_result(format_project(result.data))


@altiteam_tool(
    name="get_project",
    description="Get project details",
    input_schema={
        "type": "object",
        "properties": {"projectId": {"type": "string", "description": "Project ID"}},
        "required": ["projectId"],
    },
)
async def get_project(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    project, error = await _load_project(args, context)
    if error:
        return error
    return text_result(format_project(project))


@altiteam_tool(
    name="list_projects",
    description="List projects in an organization (defaults to the user's first organization)",
    input_schema={
        "type": "object",
        "properties": {
            "organizationId": {"type": "string", "description": "Organization ID"},
            "status": {"type": "string", "enum": PROJECT_STATUSES, "description": "Filter by status"},
        },
    },
)
async def list_projects(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    status = args.get("status")
    result = await context.repositories.projects.find_all(
        lambda p: p.organization_id == org.data and (status is None or p.status.value == status)
    )
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result("No projects found.")
    return text_result("\n\n".join(format_project(p) for p in result.data))


@altiteam_tool(
    name="update_project",
    description="Update project information",
    input_schema={
        "type": "object",
        "properties": {
            "projectId": {"type": "string", "description": "Project ID"},
            "name": {"type": "string", "minLength": 1, "description": "Project name"},
            "description": {"type": "string", "description": "Project description"},
            "status": {"type": "string", "description": "Project status", "enum": PROJECT_STATUSES},
            "startDate": {"type": "string", "description": "Project start date (ISO format)"},
            "endDate": {"type": "string", "description": "Project end date (ISO format)"},
        },
        "required": ["projectId"],
    },
)
async def update_project(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    project, error = await _load_project(args, context)
    if error:
        return error

    changes = optional_fields(args, PROJECT_FIELDS)
    if args.get("status"):
        changes["status"] = ProjectStatus(args["status"])
    if not changes:
        return error_result("Nothing to update")

    result = await context.repositories.projects.update(project.id, **changes)
    if not result.success:
        return failure_result(result)
    return text_result(format_project(result.data))


@altiteam_tool(
    name="delete_project",
    description="Delete a project",
    input_schema={
        "type": "object",
        "properties": {"projectId": {"type": "string", "description": "Project ID"}},
        "required": ["projectId"],
    },
)
async def delete_project(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    project, error = await _load_project(args, context)
    if error:
        return error

    result = await context.repositories.projects.delete(project.id)
    if not result.success:
        return failure_result(result)
    return text_result(f"Project '{project.name}' deleted.")
