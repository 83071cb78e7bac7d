"""Domain entities stored by the repository layer."""
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


@dataclass
class Entity:
    """Common fields shared by all stored records."""
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, Enum):
                data[key] = value.value
        return data


@dataclass
class User(Entity):
    email: str = ""
    name: Optional[str] = None
    bio: Optional[str] = None


@dataclass
class Organization(Entity):
    name: str = ""
    owner_id: str = ""
    description: Optional[str] = None


@dataclass
class Membership(Entity):
    organization_id: str = ""
    user_id: str = ""
    role: MemberRole = MemberRole.MEMBER


@dataclass
class Department(Entity):
    name: str = ""
    organization_id: str = ""
    description: Optional[str] = None
    parent_id: Optional[str] = None


@dataclass
class Team(Entity):
    name: str = ""
    organization_id: str = ""
    description: Optional[str] = None
    member_ids: List[str] = field(default_factory=list)


@dataclass
class Project(Entity):
    name: str = ""
    organization_id: str = ""
    description: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass
class Task(Entity):
    title: str = ""
    creator_id: str = ""
    organization_id: Optional[str] = None
    project_id: Optional[str] = None
    description: str = ""
    assignee_id: Optional[str] = None
    due_date: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM


@dataclass
class Comment(Entity):
    task_id: str = ""
    author_id: str = ""
    content: str = ""


@dataclass
class Invitation(Entity):
    organization_id: str = ""
    email: str = ""
    invited_by: str = ""
    role: MemberRole = MemberRole.MEMBER
    status: InvitationStatus = InvitationStatus.PENDING
