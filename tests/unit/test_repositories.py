"""Unit tests for the in-memory repository layer."""
import pytest

from altiteam.core.result import Failure, Success, failure, is_failure, is_success, success
from altiteam.repositories import NotFoundError
from altiteam.repositories.models import MemberRole, Project, ProjectStatus


class TestResult:
    def test_success(self):
        result = success(5)
        assert isinstance(result, Success)
        assert is_success(result) and not is_failure(result)

    def test_failure_from_string(self):
        result = failure("nope")
        assert isinstance(result, Failure)
        assert isinstance(result.error, ValueError)
        assert result.message == "nope"


class TestInMemoryRepository:
    """CRUD behaviour of a single repository."""

    async def test_create_and_find(self, repositories):
        created = await repositories.projects.create(name="Apollo", organization_id="org-1")
        assert created.success

        found = await repositories.projects.find_by_id(created.data.id)
        assert found.data == created.data
        assert found.data.status == ProjectStatus.PLANNING

    async def test_find_missing_is_success_none(self, repositories):
        found = await repositories.projects.find_by_id("missing")
        assert found.success and found.data is None

    async def test_create_rejects_unknown_fields(self, repositories):
        result = await repositories.projects.create(name="x", colour="red")
        assert not result.success
        assert "Invalid Project data" in result.message

    async def test_update(self, repositories):
        created = await repositories.projects.create(name="Apollo", organization_id="org-1")
        updated = await repositories.projects.update(created.data.id, status=ProjectStatus.ACTIVE)

        assert updated.data.status == ProjectStatus.ACTIVE
        assert updated.data.updated_at >= created.data.updated_at
        assert updated.data.created_at == created.data.created_at

    async def test_update_rejects_immutable_and_unknown(self, repositories):
        created = await repositories.projects.create(name="Apollo")
        assert not (await repositories.projects.update(created.data.id, id="other")).success
        assert not (await repositories.projects.update(created.data.id, colour="red")).success

    async def test_update_missing(self, repositories):
        result = await repositories.projects.update("missing", name="x")
        assert isinstance(result.error, NotFoundError)

    async def test_delete(self, repositories):
        created = await repositories.projects.create(name="Apollo")
        assert (await repositories.projects.delete(created.data.id)).success
        assert not (await repositories.projects.delete(created.data.id)).success

    async def test_find_all_with_predicate(self, repositories):
        await repositories.projects.create(name="A", organization_id="o1")
        await repositories.projects.create(name="B", organization_id="o2")
        await repositories.projects.create(name="C", organization_id="o1")

        result = await repositories.projects.find_all(lambda p: p.organization_id == "o1")
        assert [p.name for p in result.data] == ["A", "C"]

    def test_to_dict_serializes(self):
        data = Project(name="Apollo").to_dict()
        assert data["status"] == "planning"
        assert isinstance(data["created_at"], str)


class TestAccess:
    """Cross-entity helpers used by the tools."""

    async def test_create_organization_adds_owner(self, repositories, user):
        org = (await repositories.create_organization(owner_id=user.id, name="Acme")).data
        memberships = (await repositories.memberships.find_all()).data

        assert [(m.user_id, m.organization_id, m.role) for m in memberships] == [
            (user.id, org.id, MemberRole.OWNER)
        ]
        assert await repositories.has_access(user.id, org.id)
        assert not await repositories.has_access("stranger", org.id)
        assert not await repositories.has_access(user.id, None)

    async def test_resolve_default_organization(self, repositories, organization, user):
        resolved = await repositories.resolve_organization_id(user.id, None)
        assert resolved.data == organization.id

    async def test_resolve_without_membership(self, repositories, user):
        resolved = await repositories.resolve_organization_id(user.id, None)
        assert not resolved.success
        assert "Create an organization first" in resolved.message

    async def test_resolve_foreign_organization(self, repositories, organization):
        resolved = await repositories.resolve_organization_id("stranger", organization.id)
        assert isinstance(resolved.error, PermissionError)

    async def test_ensure_user_is_idempotent(self, repositories):
        first = await repositories.ensure_user("u-9", email="u9@example.com")
        second = await repositories.ensure_user("u-9")
        assert first.data is second.data
        assert second.data.email == "u9@example.com"


@pytest.mark.parametrize("value", ["planning", "active", "on-hold", "completed"])
def test_project_status_values(value):
    assert ProjectStatus(value).value == value
