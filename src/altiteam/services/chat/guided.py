"""Guided workflow engine: the step transition function and execution.

The engine interprets each user message against the active workflow without
involving the model. Reaching ``confirm`` and answering yes maps the
collected fields onto a single create tool call.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from altiteam.core.registry import ToolContext
from altiteam.services.intent.router import WorkflowCommand, parse_command

from .store import ConversationStore
from .tool_runner import ToolCall, ToolRunner
from .workflow import (
    EntityType,
    WorkflowState,
    WorkflowStep,
    confirmation_prompt,
    create_workflow_state,
    field_for_step,
    get_step_prompt,
    next_step,
)

logger = logging.getLogger(__name__)

CANCEL_MESSAGE = "Okay, I've cancelled that. Let me know if there's anything else you need."
CONFIRM_REPROMPT = "Please answer yes or no. Shall I go ahead and create this {entity}?"

# entity type -> (tool name, step_data key -> tool argument name)
EXECUTION_TOOLS: Dict[EntityType, Tuple[str, Dict[str, str]]] = {
    EntityType.PROJECT: ("create_project", {"name": "name", "description": "description"}),
    EntityType.TASK: (
        "create_task",
        {"name": "title", "description": "description", "assigneeId": "assigneeId", "dueDate": "dueDate"},
    ),
    EntityType.TEAM: ("create_team", {"name": "name", "description": "description"}),
    EntityType.DEPARTMENT: ("create_department", {"name": "name", "description": "description"}),
    EntityType.ORGANIZATION: ("create_organization", {"name": "name", "description": "description"}),
}

# The first mapped key is required; the rest are forwarded only when non-empty
_REQUIRED_KEY = "name"


@dataclass
class StepResult:
    """Reply for one workflow turn and the state left behind (None if destroyed)."""
    response: str
    next_state: Optional[WorkflowState]


def build_tool_call(state: WorkflowState) -> Optional[ToolCall]:
    """Map collected step data onto the entity's create tool."""
    mapping = EXECUTION_TOOLS.get(state.entity_type)
    if mapping is None:
        return None

    tool_name, arg_names = mapping
    step_data = state.data.step_data
    args: Dict[str, Any] = {}
    for key, arg_name in arg_names.items():
        value = step_data.get(key)
        if key == _REQUIRED_KEY:
            args[arg_name] = value or ""
        elif value:
            args[arg_name] = value
    return ToolCall(name=tool_name, input=args)


class GuidedWorkflowEngine:
    """Applies user messages to guided workflows stored in a ConversationStore."""

    def __init__(self, store: ConversationStore, tool_runner: ToolRunner):
        self.store = store
        self.tool_runner = tool_runner

    async def start(
        self,
        conversation_id: str,
        entity_type: EntityType,
        action: str = "create",
    ) -> StepResult:
        """Create a workflow (replacing any old one) and ask for the first field."""
        state = create_workflow_state(conversation_id, entity_type, action)
        intro = get_step_prompt(WorkflowStep.INIT, state.entity_type)

        state.move_to(next_step(WorkflowStep.INIT, state.entity_type))
        await self.store.set(conversation_id, state)

        logger.info(f"[WORKFLOW] Started {action} {state.entity_type.value} for {conversation_id}")
        return StepResult(
            response=f"{intro}\n\n{get_step_prompt(state.current_step, state.entity_type)}",
            next_state=state,
        )

    async def step(self, workflow: WorkflowState, message: str, context: ToolContext) -> StepResult:
        """Advance ``workflow`` by one user message.

        The caller is expected to hold ``store.lock(workflow.id)``.
        """
        command = parse_command(message)
        entity = workflow.entity_type.value
        logger.debug(f"[WORKFLOW] {workflow.id} at {workflow.current_step.value}, command={command}")

        if command == WorkflowCommand.CANCEL:
            await self.store.delete(workflow.id)
            logger.info(f"[WORKFLOW] Cancelled {entity} workflow {workflow.id}")
            return StepResult(CANCEL_MESSAGE, None)

        if workflow.current_step == WorkflowStep.CONFIRM:
            if command == WorkflowCommand.CONFIRM:
                return await self.execute(workflow, context)
            return StepResult(CONFIRM_REPROMPT.format(entity=entity), workflow)

        if command == WorkflowCommand.BACK and workflow.current_step != WorkflowStep.INIT:
            # Restart from the first field; collected values stay until re-entered
            intro = get_step_prompt(WorkflowStep.INIT, workflow.entity_type)
            workflow.move_to(next_step(WorkflowStep.INIT, workflow.entity_type))
            await self.store.set(workflow.id, workflow)
            return StepResult(f"{intro}\n\n{self._prompt_for(workflow)}", workflow)

        if command != WorkflowCommand.SKIP:
            field_name = field_for_step(workflow.current_step)
            if field_name is not None:
                workflow.record(field_name, message)

        workflow.move_to(next_step(workflow.current_step, workflow.entity_type))
        await self.store.set(workflow.id, workflow)
        return StepResult(self._prompt_for(workflow), workflow)

    def _prompt_for(self, workflow: WorkflowState) -> str:
        if workflow.current_step == WorkflowStep.CONFIRM:
            return confirmation_prompt(workflow)
        return get_step_prompt(workflow.current_step, workflow.entity_type)

    async def execute(self, workflow: WorkflowState, context: ToolContext) -> StepResult:
        """Run the create tool for a confirmed workflow.

        The workflow is removed from the store whatever the outcome.
        """
        entity = workflow.entity_type.value
        workflow.move_to(WorkflowStep.EXECUTING)

        try:
            call = build_tool_call(workflow)
            if call is None:
                return StepResult(f"Creating a {entity} isn't supported yet.", None)

            logger.info(f"[WORKFLOW] Executing {call.name} for {workflow.id}")
            result = await self.tool_runner.run_tool(call, context)
        except Exception as e:
            logger.error(f"[WORKFLOW] Execution failed for {workflow.id}: {e}", exc_info=True)
            return StepResult(_failure_message(entity, str(e)), None)
        finally:
            await self.store.delete(workflow.id)

        if result.is_error:
            logger.warning(f"[WORKFLOW] {call.name} failed for {workflow.id}: {result.content}")
            return StepResult(_failure_message(entity, result.content), None)

        return StepResult(f"✅ Successfully created {entity}!\n\n{result.content}", None)


def _failure_message(entity: str, detail: str) -> str:
    return (
        f"❌ Sorry, I couldn't create the {entity}: {detail}\n\n"
        f"Feel free to start again by asking me to create a new {entity}."
    )
