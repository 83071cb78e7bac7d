"""Organization membership and invitation tools."""
from mcp.types import CallToolResult

from altiteam.core.registry import ToolContext, altiteam_tool
from altiteam.repositories.models import MemberRole

from ._common import error_result, failure_result, require_access, require_user, text_result

INVITABLE_ROLES = [MemberRole.ADMIN.value, MemberRole.MEMBER.value]


@altiteam_tool(
    name="invite_member",
    description="Invite someone to an organization by email",
    input_schema={
        "type": "object",
        "properties": {
            "organizationId": {"type": "string", "description": "Organization ID"},
            "email": {"type": "string", "pattern": "^[^@\\s]+@[^@\\s]+$", "description": "Invitee email"},
            "role": {"type": "string", "enum": INVITABLE_ROLES, "description": "Role to grant"},
        },
        "required": ["email"],
    },
)
async def invite_member(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied

    org = await context.repositories.resolve_organization_id(context.user_id, args.get("organizationId"))
    if not org.success:
        return error_result(str(org.error))

    email = args["email"].lower()
    pending = await context.repositories.invitations.find_all(
        lambda i: i.organization_id == org.data and i.email == email
    )
    if pending.success and pending.data:
        return text_result(f"{email} has already been invited.")

    result = await context.repositories.invitations.create(
        organization_id=org.data,
        email=email,
        invited_by=context.user_id,
        role=MemberRole(args.get("role", MemberRole.MEMBER.value)),
    )
    if not result.success:
        return failure_result(result)
    return text_result(f"Invitation sent to {email} (role: {result.data.role.value}). Invitation ID: {result.data.id}")


@altiteam_tool(
    name="list_organization_members",
    description="List members of an organization",
    input_schema={
        "type": "object",
        "properties": {"organizationId": {"type": "string", "description": "Organization ID"}},
        "required": ["organizationId"],
    },
)
async def list_organization_members(args: dict, context: ToolContext) -> CallToolResult:
    denied = require_user(context)
    if denied:
        return denied
    denied = await require_access(context, args["organizationId"])
    if denied:
        return denied

    result = await context.repositories.memberships.find_all(
        lambda m: m.organization_id == args["organizationId"]
    )
    if not result.success:
        return failure_result(result)
    return text_result("\n".join(
        f"- User {m.user_id}: {m.role.value} (joined: {m.created_at.date().isoformat()})"
        for m in result.data
    ))
