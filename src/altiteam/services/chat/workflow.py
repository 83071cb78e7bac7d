"""Guided workflow state: entity types, step sequences, prompts and summaries.

A guided workflow walks the user through creating one entity without calling
the model. Each entity type carries its own step sequence; the transition
logic lives in ``guided.py``.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional


class EntityType(str, Enum):
    """Entity kinds that have a guided creation workflow."""
    PROJECT = "project"
    TASK = "task"
    TEAM = "team"
    DEPARTMENT = "department"
    ORGANIZATION = "organization"


class WorkflowStep(str, Enum):
    INIT = "init"
    COLLECT_NAME = "collect_name"
    COLLECT_DESCRIPTION = "collect_description"
    COLLECT_ASSIGNEE = "collect_assignee"
    COLLECT_DATE = "collect_date"
    CONFIRM = "confirm"
    EXECUTING = "executing"


class WorkflowStatus(str, Enum):
    COLLECTING = "collecting"
    EXECUTING = "executing"


_BASIC_STEPS = (
    WorkflowStep.INIT,
    WorkflowStep.COLLECT_NAME,
    WorkflowStep.COLLECT_DESCRIPTION,
    WorkflowStep.CONFIRM,
    WorkflowStep.EXECUTING,
)

STEP_SEQUENCES: Dict[EntityType, tuple] = {
    EntityType.PROJECT: _BASIC_STEPS,
    EntityType.TASK: (
        WorkflowStep.INIT,
        WorkflowStep.COLLECT_NAME,
        WorkflowStep.COLLECT_DESCRIPTION,
        WorkflowStep.COLLECT_ASSIGNEE,
        WorkflowStep.COLLECT_DATE,
        WorkflowStep.CONFIRM,
        WorkflowStep.EXECUTING,
    ),
    EntityType.TEAM: _BASIC_STEPS,
    EntityType.DEPARTMENT: _BASIC_STEPS,
    EntityType.ORGANIZATION: _BASIC_STEPS,
}

# Collection step -> key in step_data
STEP_FIELDS: Dict[WorkflowStep, str] = {
    WorkflowStep.COLLECT_NAME: "name",
    WorkflowStep.COLLECT_DESCRIPTION: "description",
    WorkflowStep.COLLECT_ASSIGNEE: "assigneeId",
    WorkflowStep.COLLECT_DATE: "dueDate",
}

_STEP_PROMPTS: Dict[WorkflowStep, str] = {
    WorkflowStep.INIT: "Let me help you create a new {entity}. I'll need a few details.",
    WorkflowStep.COLLECT_NAME: "What would you like to name this {entity}?",
    WorkflowStep.COLLECT_DESCRIPTION: "Please provide a description for this {entity}.",
    WorkflowStep.COLLECT_ASSIGNEE: "Who should be assigned to this task?",
    WorkflowStep.COLLECT_DATE: "When is this task due?",
    WorkflowStep.CONFIRM: (
        "I've collected all the information. "
        "Would you like me to proceed with creating this {entity}?"
    ),
    WorkflowStep.EXECUTING: "Creating the {entity}...",
}


def status_for_step(step: WorkflowStep) -> WorkflowStatus:
    if step == WorkflowStep.EXECUTING:
        return WorkflowStatus.EXECUTING
    return WorkflowStatus.COLLECTING


@dataclass
class WorkflowData:
    step_data: Dict[str, str] = field(default_factory=dict)


@dataclass
class WorkflowState:
    """State of one guided workflow, keyed by conversation id."""
    id: str
    entity_type: EntityType
    action: str
    current_step: WorkflowStep = WorkflowStep.INIT
    status: WorkflowStatus = WorkflowStatus.COLLECTING
    data: WorkflowData = field(default_factory=WorkflowData)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def steps(self) -> tuple:
        return STEP_SEQUENCES[self.entity_type]

    def move_to(self, step: WorkflowStep) -> None:
        """Set the current step, keeping status in sync."""
        if step not in self.steps:
            raise ValueError(f"Step '{step.value}' is not part of the {self.entity_type.value} workflow")
        self.current_step = step
        self.status = status_for_step(step)
        self.last_updated_at = datetime.now(timezone.utc)

    def record(self, key: str, value: str) -> None:
        self.data.step_data[key] = value
        self.last_updated_at = datetime.now(timezone.utc)


def create_workflow_state(conversation_id: str, entity_type: EntityType, action: str = "create") -> WorkflowState:
    return WorkflowState(id=conversation_id, entity_type=EntityType(entity_type), action=action)


def next_step(step: WorkflowStep, entity_type: EntityType) -> WorkflowStep:
    """Return the step after ``step``; the last step maps to itself."""
    steps = STEP_SEQUENCES[entity_type]
    index = steps.index(step)
    if index >= len(steps) - 1:
        return step
    return steps[index + 1]


def get_step_prompt(step: WorkflowStep, entity_type: EntityType) -> str:
    return _STEP_PROMPTS[step].format(entity=EntityType(entity_type).value)


def field_label(key: str) -> str:
    """Turn a camelCase key into a title-cased label (``assigneeId`` -> ``Assignee Id``)."""
    words = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", key).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def format_step_data(step_data: Dict[str, str]) -> str:
    """Render collected fields as a markdown bullet list."""
    if not step_data:
        return "No data collected yet."
    return "\n".join(f"- **{field_label(key)}**: {value}" for key, value in step_data.items())


def confirmation_prompt(state: WorkflowState) -> str:
    return f"{get_step_prompt(WorkflowStep.CONFIRM, state.entity_type)}\n\n{format_step_data(state.data.step_data)}"


def field_for_step(step: WorkflowStep) -> Optional[str]:
    return STEP_FIELDS.get(step)
