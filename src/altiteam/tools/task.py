"""Task and task-comment tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool
from altiteam.repositories.models import TaskPriority, TaskStatus

from ._common import (
    error_result,
    failure_result,
    format_comment,
    format_task,
    format_task_line,
    optional_fields,
    require_access,
    require_user,
    text_result,
)

TASK_STATUSES = [status.value for status in TaskStatus]
TASK_PRIORITIES = [priority.value for priority in TaskPriority]

TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "assigneeId": "assignee_id",
    "dueDate": "due_date",
}


async def _load_task(task_id: str, context: ToolContext):
    """Fetch a task and check the user may see it; returns (task, error_result)."""
    result = await context.repositories.tasks.find_by_id(task_id)
    if not result.success:
        return None, failure_result(result)
    task = result.data
    if task is None:
        return None, error_result("Task not found")

    if task.organization_id:
        denied = await require_access(context, task.organization_id)
        if denied:
            return None, error_result("Access denied: User does not have access to this task")
    elif context.user_id not in (task.creator_id, task.assignee_id):
        return None, error_result("Access denied: User does not have access to this task")
    return task, None


@altiteam_tool(
    name="create_task",
    description="Create a new task, optionally inside a project",
    input_schema={
        "type": "object",
        "properties": {
            "title": {"type": "string", "minLength": 1, "description": "Task title"},
            "description": {"type": "string", "description": "Task description"},
            "projectId": {"type": "string", "description": "Project ID"},
            "assigneeId": {"type": "string", "description": "User ID of the assignee"},
            "dueDate": {"type": "string", "description": "Due date (ISO format)"},
            "priority": {"type": "string", "enum": TASK_PRIORITIES, "description": "Task priority"},
        },
        "required": ["title"],
    },
)
async def create_task(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    organization_id = None
    if args.get("projectId"):
        project = await context.repositories.projects.find_by_id(args["projectId"])
        if not project.success:
            return failure_result(project)
        if project.data is None:
            return error_result("Project not found")
        denied = await require_access(context, project.data.organization_id)
        if denied:
            return denied
        organization_id = project.data.organization_id

    data = optional_fields(args, TASK_FIELDS)
    data.setdefault("description", "")
    result = await context.repositories.tasks.create(
        creator_id=context.user_id,
        organization_id=organization_id,
        project_id=args.get("projectId"),
        priority=TaskPriority(args.get("priority", TaskPriority.MEDIUM.value)),
        **data,
    )
    if not result.success:
        return failure_result(result)
    return text_result(format_task(result.data))


@altiteam_tool(
    name="get_task",
    description="Get task details",
    input_schema={
        "type": "object",
        "properties": {"taskId": {"type": "string", "description": "Task ID"}},
        "required": ["taskId"],
    },
)
async def get_task(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    task, error = await _load_task(args["taskId"], context)
    if error:
        return error
    return text_result(format_task(task))


@altiteam_tool(
    name="update_task",
    description="Update a task's fields or status",
    input_schema={
        "type": "object",
        "properties": {
            "taskId": {"type": "string", "description": "Task ID"},
            "title": {"type": "string", "minLength": 1},
            "description": {"type": "string"},
            "assigneeId": {"type": "string"},
            "dueDate": {"type": "string"},
            "status": {"type": "string", "enum": TASK_STATUSES},
            "priority": {"type": "string", "enum": TASK_PRIORITIES},
        },
        "required": ["taskId"],
    },
)
async def update_task(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    task, error = await _load_task(args["taskId"], context)
    if error:
        return error

    changes = optional_fields(args, TASK_FIELDS)
    if args.get("status"):
        changes["status"] = TaskStatus(args["status"])
    if args.get("priority"):
        changes["priority"] = TaskPriority(args["priority"])
    if not changes:
        return error_result("Nothing to update")

    result = await context.repositories.tasks.update(task.id, **changes)
    if not result.success:
        return failure_result(result)
    return text_result(format_task(result.data))


@altiteam_tool(
    name="delete_task",
    description="Delete a task",
    input_schema={
        "type": "object",
        "properties": {"taskId": {"type": "string", "description": "Task ID"}},
        "required": ["taskId"],
    },
)
async def delete_task(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    task, error = await _load_task(args["taskId"], context)
    if error:
        return error

    result = await context.repositories.tasks.delete(task.id)
    if not result.success:
        return failure_result(result)
    return text_result(f"Task '{task.title}' deleted.")


@altiteam_tool(
    name="list_tasks",
    description="List tasks in a project",
    input_schema={
        "type": "object",
        "properties": {
            "projectId": {"type": "string", "description": "Project ID"},
            "status": {"type": "string", "enum": TASK_STATUSES, "description": "Filter by status"},
        },
        "required": ["projectId"],
    },
)
async def list_tasks(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    project = await context.repositories.projects.find_by_id(args["projectId"])
    if not project.success:
        return failure_result(project)
    if project.data is None:
        return error_result("Project not found")
    denied = await require_access(context, project.data.organization_id)
    if denied:
        return denied

    status = args.get("status")
    result = await context.repositories.tasks.find_all(
        lambda t: t.project_id == project.data.id and (status is None or t.status.value == status)
    )
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result(f"No tasks in project '{project.data.name}'.")
    return text_result("\n".join(format_task_line(t) for t in result.data))


@altiteam_tool(
    name="get_my_tasks",
    description="List tasks assigned to or created by the current user",
    input_schema={
        "type": "object",
        "properties": {
            "status": {"type": "string", "enum": TASK_STATUSES, "description": "Filter by status"},
        },
    },
)
async def get_my_tasks(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    user_id = context.user_id
    status = args.get("status")
    result = await context.repositories.tasks.find_all(
        lambda t: (t.assignee_id == user_id or (t.assignee_id is None and t.creator_id == user_id))
        and (status is None or t.status.value == status)
    )
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result("You have no tasks.")
    return text_result(f"You have {len(result.data)} task(s):\n" + "\n".join(
        format_task_line(t) for t in result.data
    ))


@altiteam_tool(
    name="add_task_comment",
    description="Add a comment to a task",
    input_schema={
        "type": "object",
        "properties": {
            "taskId": {"type": "string", "description": "Task ID"},
            "content": {"type": "string", "minLength": 1, "description": "Comment text"},
        },
        "required": ["taskId", "content"],
    },
)
async def add_task_comment(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    task, error = await _load_task(args["taskId"], context)
    if error:
        return error

    result = await context.repositories.comments.create(
        task_id=task.id, author_id=context.user_id, content=args["content"]
    )
    if not result.success:
        return failure_result(result)
    return text_result(f"Comment added to '{task.title}':\n{format_comment(result.data)}")


@altiteam_tool(
    name="get_task_comments",
    description="List the comments on a task",
    input_schema={
        "type": "object",
        "properties": {"taskId": {"type": "string", "description": "Task ID"}},
        "required": ["taskId"],
    },
)
async def get_task_comments(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    task, error = await _load_task(args["taskId"], context)
    if error:
        return error

    result = await context.repositories.comments.find_all(lambda c: c.task_id == task.id)
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result(f"No comments on '{task.title}'.")
    return text_result("\n".join(format_comment(c) for c in result.data))
