"""Tool-calling orchestrator: one model round trip with at most one round of tools.

Phase 1 sends the history with the registered tool schemas. When the model
asks for tools they run concurrently, and phase 2 sends the history, the
phase-1 text and a user turn holding the labeled results, without tools.
Tool calls requested in phase 2 are never executed.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from altiteam.core.config import get_config
from altiteam.core.llm import LLMClient, get_llm_client
from altiteam.core.registry import ToolContext, get_all_tool_schemas

from .tool_runner import ToolCall, ToolRunner, ToolRunResult

logger = logging.getLogger(__name__)

PROCESSING_MARKER = "\n\n[Processing tool calls...]\n\n"


@dataclass
class OrchestratorReply:
    content: str
    has_tool_calls: bool = False


@dataclass
class _PendingToolUse:
    """A tool_use block being assembled from a stream."""
    id: str
    name: str
    json_parts: List[str]

    def to_call(self) -> ToolCall:
        raw = "".join(self.json_parts).strip()
        try:
            args = json.loads(raw) if raw else {}
        except json.JSONDecodeError:
            logger.warning(f"[CHAT] Could not decode input for {self.name}: {raw[:100]}")
            args = {}
        if not isinstance(args, dict):
            args = {}
        return ToolCall(name=self.name, input=args, id=self.id)


def format_tool_results(results: List[ToolRunResult]) -> str:
    return "\n\n".join(result.labeled() for result in results)


class ToolCallingOrchestrator:
    """Answers a conversation with the model, executing one round of tools."""

    def __init__(
        self,
        tool_runner: ToolRunner,
        llm_client: Optional[LLMClient] = None,
        tool_results_prompt: Optional[str] = None,
    ):
        self.tool_runner = tool_runner
        self._llm_client = llm_client
        self.tool_results_prompt = tool_results_prompt or get_config().chat.tool_results_prompt

    @property
    def llm(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    def _follow_up_messages(
        self,
        messages: List[Dict[str, Any]],
        first_text: str,
        results: List[ToolRunResult],
    ) -> List[Dict[str, Any]]:
        follow_up = list(messages)
        if first_text.strip():
            follow_up.append({"role": "assistant", "content": first_text})
        follow_up.append({
            "role": "user",
            "content": self.tool_results_prompt.format(results=format_tool_results(results)),
        })
        return follow_up

    async def answer(self, messages: List[Dict[str, Any]], context: ToolContext) -> OrchestratorReply:
        """Buffered mode: return the final reply text."""
        tools = get_all_tool_schemas()
        logger.info(f"[CHAT] Model call with {len(messages)} messages and {len(tools)} tools")

        first = await self.llm.create_message(messages, tools=tools or None)
        if not first.has_tool_calls():
            return OrchestratorReply(content=first.text, has_tool_calls=False)

        calls = [ToolCall(name=use.name, input=use.input, id=use.id) for use in first.tool_uses]
        results = await self.tool_runner.run_tools(calls, context)

        second = await self.llm.create_message(self._follow_up_messages(messages, first.text, results))
        if second.has_tool_calls():
            logger.info(f"[CHAT] Ignoring {len(second.tool_uses)} tool call(s) in follow-up response")
        return OrchestratorReply(content=second.text, has_tool_calls=True)

    async def answer_streamed(
        self,
        messages: List[Dict[str, Any]],
        context: ToolContext,
    ) -> AsyncIterator[str]:
        """Streaming mode: yield text chunks as they become available.

        Errors are logged and re-raised so the response body is aborted
        instead of ending cleanly with partial output.
        """
        try:
            tools = get_all_tool_schemas()
            pending: Dict[int, _PendingToolUse] = {}
            first_text: List[str] = []
            marker_sent = False

            async for event in self.llm.stream_message(messages, tools=tools or None):
                if event.type == "content_block_start":
                    block = event.data.get("content_block", {})
                    if block.get("type") == "tool_use":
                        pending[event.index] = _PendingToolUse(
                            id=block.get("id", ""), name=block.get("name", ""), json_parts=[]
                        )
                        if not marker_sent:
                            marker_sent = True
                            yield PROCESSING_MARKER

                elif event.type == "content_block_delta":
                    delta = event.data.get("delta", {})
                    if delta.get("type") == "text_delta":
                        text = delta.get("text", "")
                        if text:
                            first_text.append(text)
                            yield text
                    elif delta.get("type") == "input_json_delta" and event.index in pending:
                        pending[event.index].json_parts.append(delta.get("partial_json", ""))

            if not pending:
                return

            calls = [pending[index].to_call() for index in sorted(pending)]
            results = await self.tool_runner.run_tools(calls, context)
            yield format_tool_results(results) + "\n\n"

            follow_up = self._follow_up_messages(messages, "".join(first_text), results)
            async for event in self.llm.stream_message(follow_up):
                if event.type != "content_block_delta":
                    continue
                delta = event.data.get("delta", {})
                if delta.get("type") == "text_delta" and delta.get("text"):
                    yield delta["text"]

        except Exception as e:
            logger.error(f"[CHAT] Stream error: {e}", exc_info=True)
            raise
