"""Intent Router - decides whether a message continues a guided workflow,
starts one, or goes to the model with tools.

Detection is keyword based and deterministic; no model call is involved.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from altiteam.services.chat.workflow import EntityType, WorkflowState

logger = logging.getLogger(__name__)


class WorkflowCommand(str, Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    BACK = "back"
    SKIP = "skip"


class DecisionKind(str, Enum):
    CONTINUE_WORKFLOW = "continue_workflow"
    START_WORKFLOW = "start_workflow"
    DELEGATE = "delegate"


_COMMANDS = {
    "yes": WorkflowCommand.CONFIRM,
    "y": WorkflowCommand.CONFIRM,
    "confirm": WorkflowCommand.CONFIRM,
    "no": WorkflowCommand.CANCEL,
    "n": WorkflowCommand.CANCEL,
    "cancel": WorkflowCommand.CANCEL,
    "back": WorkflowCommand.BACK,
    "go back": WorkflowCommand.BACK,
    "skip": WorkflowCommand.SKIP,
}

# Checked in order; the first substring hit wins. "update the task in my
# project" therefore resolves to project.
ENTITY_KEYWORDS = ("project", "task", "team", "department", "organization", "member", "invite")

ACTION_KEYWORDS = (
    ("create", ("create", "new", "add")),
    ("update", ("update", "edit", "modify")),
    ("delete", ("delete", "remove")),
)


@dataclass
class RouterDecision:
    kind: DecisionKind
    entity_type: Optional[str] = None
    action: Optional[str] = None
    command: Optional[WorkflowCommand] = None

    @property
    def guided_entity(self) -> Optional[EntityType]:
        if self.kind != DecisionKind.START_WORKFLOW or self.entity_type is None:
            return None
        return EntityType(self.entity_type)


def parse_command(message: str) -> Optional[WorkflowCommand]:
    """Exact, case-insensitive match against the workflow control words."""
    return _COMMANDS.get(message.strip().lower())


def extract_entity_type(message: str) -> Optional[str]:
    text = message.lower()
    for keyword in ENTITY_KEYWORDS:
        if keyword in text:
            return keyword
    return None


def extract_action(message: str) -> Optional[str]:
    text = message.lower()
    for action, keywords in ACTION_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return action
    return None


def _is_guided_entity(entity: Optional[str]) -> bool:
    return entity in {e.value for e in EntityType}


class IntentRouter:
    """Routes user messages to a guided workflow or the tool-calling path."""

    def route(self, message: str, existing_workflow: Optional[WorkflowState]) -> RouterDecision:
        if existing_workflow is not None:
            return RouterDecision(
                kind=DecisionKind.CONTINUE_WORKFLOW,
                entity_type=existing_workflow.entity_type.value,
                action=existing_workflow.action,
            )

        command = parse_command(message)
        if command is not None:
            logger.debug(f"[ROUTER] Ignoring '{command.value}' with no active workflow")
            return RouterDecision(kind=DecisionKind.DELEGATE, command=command)

        entity = extract_entity_type(message)
        action = extract_action(message)

        if entity and action == "create" and _is_guided_entity(entity):
            logger.info(f"[ROUTER] Create intent for {entity}")
            return RouterDecision(kind=DecisionKind.START_WORKFLOW, entity_type=entity, action=action)

        logger.debug(f"[ROUTER] Delegating (entity={entity}, action={action})")
        return RouterDecision(kind=DecisionKind.DELEGATE, entity_type=entity, action=action)


# Global instance
intent_router = IntentRouter()
