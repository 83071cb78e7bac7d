"""Conversation store: conversation id -> active guided workflow."""
import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from .workflow import WorkflowState

logger = logging.getLogger(__name__)


class ConversationStore(ABC):
    """Keyed storage for workflow state.

    ``lock(conversation_id)`` serializes read-modify-write cycles for one
    conversation; callers hold it across get, step and set/delete.
    """

    @abstractmethod
    async def get(self, conversation_id: str) -> Optional[WorkflowState]:
        ...

    @abstractmethod
    async def set(self, conversation_id: str, state: WorkflowState) -> None:
        ...

    @abstractmethod
    async def delete(self, conversation_id: str) -> None:
        ...

    @abstractmethod
    def lock(self, conversation_id: str):
        """Async context manager guarding one conversation."""


class InMemoryConversationStore(ConversationStore):
    """Process-local store with one asyncio.Lock per conversation."""

    def __init__(self):
        self._states: Dict[str, WorkflowState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    async def get(self, conversation_id: str) -> Optional[WorkflowState]:
        return self._states.get(conversation_id)

    async def set(self, conversation_id: str, state: WorkflowState) -> None:
        if conversation_id in self._states:
            logger.debug(f"[WORKFLOW] Replacing workflow for conversation {conversation_id}")
        self._states[conversation_id] = state

    async def delete(self, conversation_id: str) -> None:
        self._states.pop(conversation_id, None)

    @asynccontextmanager
    async def lock(self, conversation_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(conversation_id, asyncio.Lock())
        self._lock_users[conversation_id] = self._lock_users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            # Drop the lock once nobody holds or waits on it
            self._lock_users[conversation_id] -= 1
            if self._lock_users[conversation_id] == 0:
                del self._lock_users[conversation_id]
                del self._locks[conversation_id]

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._states
