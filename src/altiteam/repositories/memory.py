"""In-memory repository implementation.

Each repository stores records in a dict keyed by id. All operations are
async (they sit on an I/O boundary in a persistent implementation) and return
a Result instead of raising.
"""
import logging
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Callable, Dict, Generic, List, Optional, Type, TypeVar

from altiteam.core.result import Result, failure, success

from .models import (
    Comment,
    Department,
    Entity,
    Invitation,
    MemberRole,
    Membership,
    Organization,
    Project,
    Task,
    Team,
    User,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class NotFoundError(LookupError):
    """A record with the requested id does not exist."""


class InMemoryRepository(Generic[E]):
    """Dict-backed CRUD store for one entity type."""

    def __init__(self, entity_cls: Type[E]):
        self.entity_cls = entity_cls
        self._items: Dict[str, E] = {}

    @property
    def entity_name(self) -> str:
        return self.entity_cls.__name__

    async def find_by_id(self, entity_id: str) -> Result[Optional[E]]:
        return success(self._items.get(entity_id))

    async def find_all(self, predicate: Optional[Callable[[E], bool]] = None) -> Result[List[E]]:
        items = list(self._items.values())
        if predicate is not None:
            items = [item for item in items if predicate(item)]
        items.sort(key=lambda item: item.created_at)
        return success(items)

    async def create(self, **data) -> Result[E]:
        try:
            entity = self.entity_cls(**data)
        except TypeError as e:
            return failure(ValueError(f"Invalid {self.entity_name} data: {e}"))

        self._items[entity.id] = entity
        logger.debug(f"Created {self.entity_name} {entity.id}")
        return success(entity)

    async def update(self, entity_id: str, **changes) -> Result[E]:
        existing = self._items.get(entity_id)
        if existing is None:
            return failure(NotFoundError(f"{self.entity_name} {entity_id} not found"))

        allowed = {f.name for f in fields(self.entity_cls)} - {"id", "created_at"}
        unknown = set(changes) - allowed
        if unknown:
            return failure(ValueError(f"Unknown {self.entity_name} fields: {', '.join(sorted(unknown))}"))

        updated = replace(existing, **changes, updated_at=datetime.now(timezone.utc))
        self._items[entity_id] = updated
        return success(updated)

    async def delete(self, entity_id: str) -> Result[None]:
        if self._items.pop(entity_id, None) is None:
            return failure(NotFoundError(f"{self.entity_name} {entity_id} not found"))
        return success(None)


class InMemoryRepositories:
    """All repositories plus the cross-entity access checks tools rely on."""

    def __init__(self):
        self.users: InMemoryRepository[User] = InMemoryRepository(User)
        self.organizations: InMemoryRepository[Organization] = InMemoryRepository(Organization)
        self.memberships: InMemoryRepository[Membership] = InMemoryRepository(Membership)
        self.departments: InMemoryRepository[Department] = InMemoryRepository(Department)
        self.teams: InMemoryRepository[Team] = InMemoryRepository(Team)
        self.projects: InMemoryRepository[Project] = InMemoryRepository(Project)
        self.tasks: InMemoryRepository[Task] = InMemoryRepository(Task)
        self.comments: InMemoryRepository[Comment] = InMemoryRepository(Comment)
        self.invitations: InMemoryRepository[Invitation] = InMemoryRepository(Invitation)

    async def ensure_user(self, user_id: str, email: Optional[str] = None) -> Result[User]:
        """Return the user with ``user_id``, creating a bare record if missing."""
        found = await self.users.find_by_id(user_id)
        if found.success and found.data is not None:
            return success(found.data)
        return await self.users.create(id=user_id, email=email or f"{user_id}@altiteam.local")

    async def create_organization(
        self, owner_id: str, name: str, description: Optional[str] = None
    ) -> Result[Organization]:
        """Create an organization and its owner membership."""
        created = await self.organizations.create(name=name, owner_id=owner_id, description=description)
        if not created.success:
            return created

        membership = await self.memberships.create(
            organization_id=created.data.id, user_id=owner_id, role=MemberRole.OWNER
        )
        if not membership.success:
            await self.organizations.delete(created.data.id)
            return membership
        return created

    async def organizations_for_user(self, user_id: str) -> Result[List[Organization]]:
        memberships = await self.memberships.find_all(lambda m: m.user_id == user_id)
        if not memberships.success:
            return memberships
        org_ids = {m.organization_id for m in memberships.data}
        return await self.organizations.find_all(lambda org: org.id in org_ids)

    async def has_access(self, user_id: str, organization_id: Optional[str]) -> bool:
        if not organization_id:
            return False
        memberships = await self.memberships.find_all(
            lambda m: m.user_id == user_id and m.organization_id == organization_id
        )
        return memberships.success and len(memberships.data) > 0

    async def resolve_organization_id(self, user_id: str, organization_id: Optional[str]) -> Result[str]:
        """Resolve an explicit or default organization the user may act in.

        When ``organization_id`` is omitted the user's first organization is
        used.
        """
        if organization_id:
            if await self.has_access(user_id, organization_id):
                return success(organization_id)
            return failure(PermissionError("Access denied: User does not have access to this organization"))

        orgs = await self.organizations_for_user(user_id)
        if not orgs.success:
            return orgs
        if not orgs.data:
            return failure(LookupError("You don't belong to any organization yet. Create an organization first."))
        return success(orgs.data[0].id)


_repositories: Optional[InMemoryRepositories] = None


def get_repositories() -> InMemoryRepositories:
    """Get the process-wide repository set."""
    global _repositories
    if _repositories is None:
        _repositories = InMemoryRepositories()
    return _repositories


def reset_repositories() -> InMemoryRepositories:
    """Replace the process-wide repositories with empty ones (testing)."""
    global _repositories
    _repositories = InMemoryRepositories()
    return _repositories
