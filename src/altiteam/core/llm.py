"""
AltiTeam LLM Client

Async client for the Anthropic Messages API. Supports a buffered call that
returns parsed content blocks and a streamed call that yields server-sent
events as they arrive.

Usage:
    from altiteam.core.llm import get_llm_client

    client = get_llm_client()
    response = await client.create_message(messages, tools=tools)
    async for event in client.stream_message(messages, tools=tools):
        ...
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Union

import httpx

from .config import get_config
from .exceptions import ConfigurationError, ModelCallError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


# =============================================================================
# Response Types
# =============================================================================

@dataclass
class TextBlock:
    """A text content block."""
    text: str
    type: str = "text"


@dataclass
class ToolUseBlock:
    """A tool_use content block requested by the model."""
    id: str
    name: str
    input: Dict[str, Any]
    type: str = "tool_use"


ContentBlock = Union[TextBlock, ToolUseBlock]


@dataclass
class LLMResponse:
    """Structured buffered response from the model."""
    content: List[ContentBlock] = field(default_factory=list)
    stop_reason: Optional[str] = None
    usage: Dict[str, int] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))

    @property
    def tool_uses(self) -> List[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    def has_tool_calls(self) -> bool:
        return len(self.tool_uses) > 0


@dataclass
class StreamEvent:
    """One server-sent event from a streamed model call.

    ``type`` is the event name (``content_block_start``, ``content_block_delta``,
    ``content_block_stop``, ``message_stop``, ...) and ``data`` its JSON payload.
    """
    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def index(self) -> Optional[int]:
        return self.data.get("index")


def parse_content_block(raw: Dict[str, Any]) -> Optional[ContentBlock]:
    """Convert a raw provider content block to a typed block (None if unknown)."""
    block_type = raw.get("type")
    if block_type == "text":
        return TextBlock(text=raw.get("text", ""))
    if block_type == "tool_use":
        return ToolUseBlock(id=raw.get("id", ""), name=raw["name"], input=raw.get("input") or {})
    return None


# =============================================================================
# LLM Client
# =============================================================================

class LLMClient:
    """Async client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.anthropic.com/v1",
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 4096,
        anthropic_version: str = "2023-06-01",
        timeout: float = 120.0,
    ):
        """Initialize the LLM client.

        Args:
            api_key: Provider API key
            base_url: Base URL for the Messages API
            model: Model name/identifier
            max_tokens: Maximum tokens to generate
            anthropic_version: Value of the anthropic-version header
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.anthropic_version = anthropic_version
        self.timeout = timeout

        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if not self.api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")

        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Content-Type": "application/json",
                    "x-api-key": self.api_key,
                    "anthropic-version": self.anthropic_version,
                },
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _build_payload(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]],
        system: Optional[str],
        max_tokens: Optional[int],
        stream: bool = False,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": messages,
        }
        if tools:
            payload["tools"] = tools
        if system:
            payload["system"] = system
        if stream:
            payload["stream"] = True
        return payload

    async def create_message(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Send one buffered request to the model.

        Args:
            messages: Conversation history ({role, content} dicts)
            tools: Optional tool schemas the model may call
            system: Optional system prompt
            max_tokens: Override default max_tokens

        Returns:
            LLMResponse with parsed content blocks

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamTimeoutError: If the provider does not answer in time
            ModelCallError: On any other provider or transport failure
        """
        client = await self._get_client()
        payload = self._build_payload(messages, tools, system, max_tokens)

        try:
            response = await client.post(f"{self.base_url}/messages", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"[LLM] Request to {self.base_url} timed out after {self.timeout}s")
            raise UpstreamTimeoutError(f"Model call timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"[LLM] API error {e.response.status_code}: {e.response.text[:200]}")
            raise ModelCallError(
                f"Model provider returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"[LLM] Request failed to {self.base_url}: {e}")
            raise ModelCallError(f"Model provider unreachable: {e}") from e

        blocks = [parse_content_block(raw) for raw in data.get("content", [])]

        return LLMResponse(
            content=[block for block in blocks if block is not None],
            stop_reason=data.get("stop_reason"),
            usage=data.get("usage", {}),
        )

    async def stream_message(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[StreamEvent]:
        """Stream a response from the model as parsed server-sent events.

        Yields:
            StreamEvent for every event the provider sends (pings skipped)

        Raises:
            Same as create_message. An ``error`` event in the stream raises
            ModelCallError.
        """
        client = await self._get_client()
        payload = self._build_payload(messages, tools, system, max_tokens, stream=True)

        try:
            async with client.stream("POST", f"{self.base_url}/messages", json=payload) as response:
                if response.is_error:
                    body = await response.aread()
                    logger.error(f"[LLM] Stream API error {response.status_code}: {body[:200]!r}")
                    raise ModelCallError(
                        f"Model provider returned {response.status_code}",
                        status_code=response.status_code,
                    )

                event_name: Optional[str] = None
                async for line in response.aiter_lines():
                    if not line:
                        event_name = None
                        continue

                    if line.startswith("event:"):
                        event_name = line[len("event:"):].strip()
                        continue

                    if not line.startswith("data:"):
                        continue

                    try:
                        data = json.loads(line[len("data:"):].strip())
                    except json.JSONDecodeError:
                        logger.debug(f"[LLM] Skipping undecodable stream line: {line[:100]}")
                        continue

                    event_type = event_name or data.get("type", "")
                    if event_type == "ping":
                        continue
                    if event_type == "error":
                        message = data.get("error", {}).get("message", "unknown stream error")
                        raise ModelCallError(f"Model stream error: {message}")

                    yield StreamEvent(type=event_type, data=data)

        except httpx.TimeoutException as e:
            logger.error(f"[LLM] Stream to {self.base_url} timed out after {self.timeout}s")
            raise UpstreamTimeoutError(f"Model stream timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.error(f"[LLM] Stream request failed to {self.base_url}: {e}")
            raise ModelCallError(f"Model provider unreachable: {e}") from e


# =============================================================================
# Global Client Instance
# =============================================================================

_llm_client: Optional[LLMClient] = None
_llm_client_lock = threading.Lock()


def get_llm_client() -> LLMClient:
    """Get the global LLM client instance (thread-safe).

    Returns:
        LLMClient instance
    """
    global _llm_client

    if _llm_client is None:
        with _llm_client_lock:
            if _llm_client is None:
                config = get_config()
                _llm_client = LLMClient(
                    api_key=config.llm.api_key,
                    base_url=config.llm.base_url,
                    model=config.llm.model_name,
                    max_tokens=config.llm.max_tokens,
                    anthropic_version=config.llm.anthropic_version,
                    timeout=config.llm.timeout_seconds,
                )
                logger.info(f"LLMClient initialized: {config.llm.base_url} model={config.llm.model_name}")

    return _llm_client


async def close_llm_client():
    """Close the global LLM client."""
    global _llm_client
    if _llm_client:
        await _llm_client.close()
        _llm_client = None
