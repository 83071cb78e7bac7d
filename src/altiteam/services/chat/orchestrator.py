"""Chat Orchestrator - coordinates intent routing, guided workflows and the
tool-calling path for one user turn.

1. Looks up the conversation's active workflow (under the conversation lock)
2. Routes the latest user message through the IntentRouter
3. Continues or starts a guided workflow, or
4. Delegates to the ToolCallingOrchestrator (buffered or streamed)
"""
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from altiteam.core.llm import LLMClient
from altiteam.core.registry import ToolContext
from altiteam.services.intent.router import DecisionKind, IntentRouter, intent_router

from .guided import GuidedWorkflowEngine
from .store import ConversationStore, InMemoryConversationStore
from .tool_calling import ToolCallingOrchestrator
from .tool_runner import ToolRunner

logger = logging.getLogger(__name__)


def last_user_message(messages: List[Dict[str, Any]]) -> Optional[str]:
    for message in reversed(messages):
        if message.get("role") == "user":
            return str(message.get("content", ""))
    return None


class ChatOrchestrator:
    """Entry point for the chat service."""

    def __init__(
        self,
        store: Optional[ConversationStore] = None,
        router: Optional[IntentRouter] = None,
        tool_runner: Optional[ToolRunner] = None,
        llm_client: Optional[LLMClient] = None,
    ):
        self.store = store or InMemoryConversationStore()
        self.router = router or intent_router
        self.tool_runner = tool_runner or ToolRunner()
        self.engine = GuidedWorkflowEngine(self.store, self.tool_runner)
        self.tool_calling = ToolCallingOrchestrator(self.tool_runner, llm_client=llm_client)

    async def handle_workflow_turn(
        self,
        messages: List[Dict[str, Any]],
        conversation_id: str,
        context: ToolContext,
    ) -> Optional[str]:
        """Handle the turn locally if it belongs to a guided workflow.

        Returns the reply text, or None when the turn should go to the model.
        """
        message = last_user_message(messages)
        if message is None:
            return None

        async with self.store.lock(conversation_id):
            workflow = await self.store.get(conversation_id)
            decision = self.router.route(message, workflow)
            logger.info(f"[Orchestrator] {conversation_id}: {decision.kind.value}")

            if decision.kind == DecisionKind.CONTINUE_WORKFLOW:
                result = await self.engine.step(workflow, message, context)
                return result.response

            if decision.kind == DecisionKind.START_WORKFLOW:
                result = await self.engine.start(conversation_id, decision.guided_entity, decision.action)
                return result.response

        return None

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        conversation_id: str,
        context: ToolContext,
    ) -> str:
        """Buffered turn: return the complete reply."""
        reply = await self.handle_workflow_turn(messages, conversation_id, context)
        if reply is not None:
            return reply

        answer = await self.tool_calling.answer(messages, context)
        return answer.content

    async def chat_streamed(
        self,
        messages: List[Dict[str, Any]],
        conversation_id: str,
        context: ToolContext,
    ) -> AsyncIterator[str]:
        """Streamed turn: guided replies arrive as one chunk, model replies incrementally."""
        reply = await self.handle_workflow_turn(messages, conversation_id, context)
        if reply is not None:
            yield reply
            return

        async for chunk in self.tool_calling.answer_streamed(messages, context):
            yield chunk


# =============================================================================
# Global Instance
# =============================================================================

_chat_orchestrator: Optional[ChatOrchestrator] = None


def get_chat_orchestrator() -> ChatOrchestrator:
    """Get the process-wide orchestrator (and with it the conversation store)."""
    global _chat_orchestrator
    if _chat_orchestrator is None:
        _chat_orchestrator = ChatOrchestrator()
        logger.info("ChatOrchestrator initialized")
    return _chat_orchestrator


def reset_chat_orchestrator(orchestrator: Optional[ChatOrchestrator] = None) -> None:
    """Replace the global orchestrator (testing)."""
    global _chat_orchestrator
    _chat_orchestrator = orchestrator
