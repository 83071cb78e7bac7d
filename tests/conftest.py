"""
AltiTeam Test Configuration

Shared fixtures and configuration for pytest.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from altiteam.core import config as config_module
from altiteam.core.config import AuthConfig, ChatConfig, Config, LLMConfig
from altiteam.core.llm import LLMResponse, StreamEvent, TextBlock, ToolUseBlock
from altiteam.core.loader import load_tools
from altiteam.core.registry import ToolContext
from altiteam.repositories import reset_repositories
from altiteam.services.chat.orchestrator import reset_chat_orchestrator

PROJECT_ROOT = Path(__file__).parent.parent

TEST_TOKEN = "test-token"
TEST_USER_ID = "user-1"


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session", autouse=True)
def registered_tools():
    """Import every tool module once so the registry is populated."""
    return load_tools()


@pytest.fixture(autouse=True)
def test_config(monkeypatch) -> Config:
    """Install a deterministic configuration for every test."""
    config = Config(
        llm=LLMConfig(api_key="test-anthropic-key"),
        chat=ChatConfig(tool_timeout_seconds=1.0),
        auth=AuthConfig(api_keys={TEST_TOKEN: TEST_USER_ID}),
    )
    monkeypatch.setattr(config_module, "_config", config)
    return config


@pytest.fixture(autouse=True)
def fresh_state():
    """Reset process-wide repositories and the chat orchestrator."""
    repositories = reset_repositories()
    reset_chat_orchestrator(None)
    yield repositories
    reset_chat_orchestrator(None)


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def repositories(fresh_state):
    return fresh_state


@pytest.fixture
async def user(repositories):
    result = await repositories.ensure_user(TEST_USER_ID, email="ada@example.com")
    return result.data


@pytest.fixture
async def organization(repositories, user):
    """An organization owned by the test user."""
    result = await repositories.create_organization(owner_id=user.id, name="Acme", description="Test org")
    return result.data


@pytest.fixture
def tool_context(repositories) -> ToolContext:
    return ToolContext(user_id=TEST_USER_ID, repositories=repositories)


# =============================================================================
# Fake LLM
# =============================================================================

class FakeLLMClient:
    """Scripted stand-in for LLMClient.

    ``responses`` feed ``create_message`` in order; ``streams`` feed
    ``stream_message`` in order (each a list of StreamEvent). Every call's
    arguments are recorded in ``calls``.
    """

    def __init__(
        self,
        responses: Optional[List[LLMResponse]] = None,
        streams: Optional[List[List[StreamEvent]]] = None,
    ):
        self.responses = list(responses or [])
        self.streams = list(streams or [])
        self.calls: List[Dict[str, Any]] = []

    async def create_message(self, messages, tools=None, system=None, max_tokens=None):
        self.calls.append({"mode": "create", "messages": list(messages), "tools": tools})
        return self.responses.pop(0)

    async def stream_message(self, messages, tools=None, system=None, max_tokens=None):
        self.calls.append({"mode": "stream", "messages": list(messages), "tools": tools})
        for event in self.streams.pop(0):
            if isinstance(event, Exception):
                raise event
            yield event

    async def close(self):
        pass


def text_response(text: str) -> LLMResponse:
    return LLMResponse(content=[TextBlock(text=text)], stop_reason="end_turn")


def tool_response(name: str, args: Optional[Dict[str, Any]] = None, text: str = "", tool_id: str = "toolu_1") -> LLMResponse:
    content = [TextBlock(text=text)] if text else []
    content.append(ToolUseBlock(id=tool_id, name=name, input=args or {}))
    return LLMResponse(content=content, stop_reason="tool_use")


def text_stream(*chunks: str) -> List[StreamEvent]:
    events = [StreamEvent("message_start", {"message": {}}),
              StreamEvent("content_block_start", {"index": 0, "content_block": {"type": "text", "text": ""}})]
    for chunk in chunks:
        events.append(StreamEvent("content_block_delta", {"index": 0, "delta": {"type": "text_delta", "text": chunk}}))
    events.append(StreamEvent("content_block_stop", {"index": 0}))
    events.append(StreamEvent("message_stop", {}))
    return events


def tool_stream(name: str, json_parts: List[str], text: str = "", index: int = 1) -> List[StreamEvent]:
    events = text_stream(text) if text else [StreamEvent("message_start", {"message": {}})]
    events = [e for e in events if e.type != "message_stop"]
    events.append(StreamEvent("content_block_start", {
        "index": index,
        "content_block": {"type": "tool_use", "id": f"toolu_{index}", "name": name, "input": {}},
    }))
    for part in json_parts:
        events.append(StreamEvent("content_block_delta", {
            "index": index, "delta": {"type": "input_json_delta", "partial_json": part},
        }))
    events.append(StreamEvent("content_block_stop", {"index": index}))
    events.append(StreamEvent("message_stop", {}))
    return events


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()
