"""Concurrent tool execution for a batch of tool calls.

Every call is validated against its input schema, bounded by the configured
tool timeout, and converted to text. A failing call becomes error text for
that call only; siblings are unaffected and results keep the call order.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from altiteam.core.config import get_config
from altiteam.core.exceptions import ToolNotFoundError, ToolValidationError
from altiteam.core.registry import ToolContext, call_tool, extract_text

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """A tool invocation requested by the model or a guided workflow."""
    name: str
    input: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None


@dataclass
class ToolRunResult:
    tool_name: str
    content: str
    is_error: bool = False

    def labeled(self) -> str:
        return f"[{self.tool_name}]\n{self.content}"


class ToolRunner:
    """Runs tool calls concurrently through the registry."""

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else get_config().chat.tool_timeout_seconds
        )

    async def run_tool(self, call: ToolCall, context: ToolContext) -> ToolRunResult:
        """Run one call; failures come back as error results, never raise.

        Cancellation still propagates so an abandoned request stops its tools.
        """
        try:
            result = await asyncio.wait_for(
                call_tool(call.name, call.input, context),
                timeout=self.timeout_seconds,
            )
            run_result = ToolRunResult(call.name, extract_text(result), is_error=bool(result.isError))
        except ToolNotFoundError as e:
            logger.error(f"[TOOLS] {e}")
            return ToolRunResult(call.name, f"Error: Unknown tool '{call.name}'", is_error=True)
        except ToolValidationError as e:
            logger.warning(f"[TOOLS] {e}")
            return ToolRunResult(call.name, f"Error: {e}", is_error=True)
        except asyncio.TimeoutError:
            logger.error(f"[TOOLS] {call.name} timed out after {self.timeout_seconds}s")
            return ToolRunResult(
                call.name,
                f"Error: Tool '{call.name}' timed out after {self.timeout_seconds}s",
                is_error=True,
            )
        except Exception as e:
            logger.error(f"[TOOLS] {call.name} failed: {e}", exc_info=True)
            return ToolRunResult(call.name, f"Error executing {call.name}: {e}", is_error=True)

        if run_result.is_error:
            logger.info(f"[TOOLS] {call.name} returned an error result")
        return run_result

    async def run_tools(self, calls: List[ToolCall], context: ToolContext) -> List[ToolRunResult]:
        """Run all calls concurrently; results are in call order."""
        if not calls:
            return []

        logger.info(f"[TOOLS] Running {len(calls)} tool call(s): {', '.join(c.name for c in calls)}")
        return list(await asyncio.gather(*(self.run_tool(call, context) for call in calls)))
