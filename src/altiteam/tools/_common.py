"""Shared helpers for tool handlers: result builders, access guards, formatters."""
from typing import Any, Dict, Optional

from mcp.types import CallToolResult, TextContent

from altiteam.core.registry import ToolContext
from altiteam.core.result import Result


def text_result(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=True)


def failure_result(result: Result) -> CallToolResult:
    return error_result(f"Error: {result.error}")


def require_user(context: ToolContext) -> Optional[CallToolResult]:
    """Return an error result when the context carries no authenticated user."""
    if not context.user_id:
        return error_result("Authentication required")
    return None


async def require_access(context: ToolContext, organization_id: Optional[str]) -> Optional[CallToolResult]:
    """Return an error result unless the user belongs to the organization."""
    if not await context.repositories.has_access(context.user_id, organization_id):
        return error_result("Access denied: User does not have access to this organization")
    return None


def optional_fields(args: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    """Pick present arguments and rename them from wire names to entity fields."""
    return {field: args[key] for key, field in mapping.items() if args.get(key) is not None}


# =============================================================================
# Formatters
# =============================================================================

def format_organization(org) -> str:
    desc_info = f"\nDescription: {org.description}" if org.description else ""
    return f"""**{org.name}**
ID: {org.id}{desc_info}
Created: {org.created_at.isoformat()}"""


def format_project(project) -> str:
    desc_info = f"\nDescription: {project.description}" if project.description else ""
    dates = ""
    if project.start_date or project.end_date:
        dates = f"\nDates: {project.start_date or '?'} → {project.end_date or '?'}"
    return f"""**{project.name}**
ID: {project.id}
Organization: {project.organization_id}
Status: {project.status.value}{desc_info}{dates}"""


def format_task(task) -> str:
    desc_info = f"\nDescription: {task.description}" if task.description else ""
    assignee_info = f"\nAssignee: {task.assignee_id}" if task.assignee_id else ""
    due_info = f"\nDue: {task.due_date}" if task.due_date else ""
    project_info = f"\nProject: {task.project_id}" if task.project_id else ""
    return f"""**{task.title}**
ID: {task.id}
Status: {task.status.value} | Priority: {task.priority.value}{project_info}{assignee_info}{due_info}{desc_info}"""


def format_task_line(task) -> str:
    due = f" (due {task.due_date})" if task.due_date else ""
    return f"- [{task.status.value}] **{task.title}**{due}, priority {task.priority.value}, ID: {task.id}"


def format_team(team) -> str:
    desc_info = f"\nDescription: {team.description}" if team.description else ""
    return f"""**{team.name}**
ID: {team.id}
Organization: {team.organization_id}
Members: {len(team.member_ids)}{desc_info}"""


def format_department(department) -> str:
    desc_info = f"\nDescription: {department.description}" if department.description else ""
    parent_info = f"\nParent: {department.parent_id}" if department.parent_id else ""
    return f"""**{department.name}**
ID: {department.id}
Organization: {department.organization_id}{parent_info}{desc_info}"""


def format_comment(comment) -> str:
    return f"- {comment.author_id} ({comment.created_at.isoformat()}): {comment.content}"


def format_user(user) -> str:
    name_info = f" ({user.name})" if user.name else ""
    bio_info = f"\nBio: {user.bio}" if user.bio else ""
    return f"""**{user.email}**{name_info}
ID: {user.id}{bio_info}"""
