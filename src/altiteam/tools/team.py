"""Team tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool

from ._common import (
    error_result,
    failure_result,
    format_team,
    require_access,
    require_user,
    text_result,
)


@altiteam_tool(
    name="create_team",
    description="Create a team. organizationId defaults to the user's first organization.",
    input_schema={
        "type": "object",
        "properties": {
            "organizationId": {"type": "string", "description": "Organization ID"},
            "name": {"type": "string", "minLength": 1, "description": "Team name"},
            "description": {"type": "string", "description": "Team description"},
        },
        "required": ["name"],
    },
)
async def create_team(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    result = await context.repositories.teams.create(
        name=args["name"],
        organization_id=org.data,
        description=args.get("description"),
        member_ids=[context.user_id],
    )
    if not result.success:
        return failure_result(result)
    return text_result(format_team(result.data))


@altiteam_tool(
    name="list_teams",
    description="List teams in an organization (defaults to the user's first organization)",
    input_schema={
        "type": "object",
        "properties": {"organizationId": {"type": "string", "description": "Organization ID"}},
    },
)
async def list_teams(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    result = await context.repositories.teams.find_all(lambda t: t.organization_id == org.data)
    if not result.success:
        return failure_result(result)
    if not result.data:
        return text_result("No teams found.")
    return text_result("\n\n".join(format_team(t) for t in result.data))


@altiteam_tool(
    name="add_team_member",
    description="Add an organization member to a team",
    input_schema={
        "type": "object",
        "properties": {
            "teamId": {"type": "string", "description": "Team ID"},
            "userId": {"type": "string", "description": "User ID to add"},
        },
        "required": ["teamId", "userId"],
    },
)
async def add_team_member(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    found = await context.repositories.teams.find_by_id(args["teamId"])
    if not found.success:
        return failure_result(found)
    team = found.data
    if team is None:
        return error_result("Team not found")

    denied = await require_access(context, team.organization_id)
    if denied:
        return denied
    if not await context.repositories.has_access(args["userId"], team.organization_id):
        return error_result("User is not a member of this team's organization")
    if args["userId"] in team.member_ids:
        return text_result(f"User {args['userId']} is already on team '{team.name}'.")

    result = await context.repositories.teams.update(team.id, member_ids=team.member_ids + [args["userId"]])
    if not result.success:
        return failure_result(result)
    return text_result(f"Added {args['userId']} to team '{team.name}'.")
