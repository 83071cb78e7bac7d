"""
AltiTeam API Routes

Endpoints:
    POST /chat - Conversational chat (buffered or streamed)
    GET /health - Health check
    GET /tools - List registered tools
"""

import logging
import uuid
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.responses import StreamingResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, ConfigDict, Field

from altiteam.core.config import get_config
from altiteam.core.exceptions import ConfigurationError, UpstreamTimeoutError
from altiteam.core.registry import ToolContext, get_tool_registry
from altiteam.repositories import get_repositories
from altiteam.services.chat.orchestrator import get_chat_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# API Key Authentication
# =============================================================================

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


async def get_current_user(authorization: Optional[str] = Security(api_key_header)) -> str:
    """Resolve the user id for ``Authorization: Bearer <token>``.

    Tokens map to user ids through ``auth.api_keys`` in the config.
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Unauthorized")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Unauthorized")

    user_id = get_config().auth.api_keys.get(parts[1])
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    await get_repositories().ensure_user(user_id)
    return user_id


# =============================================================================
# Request/Response Models
# =============================================================================

class ChatMessage(BaseModel):
    """One turn of the conversation history."""
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Chat request model."""
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage] = Field(..., min_length=1, description="Conversation history")
    stream: bool = Field(default=False, description="Stream the reply as plain text chunks")
    conversation_id: Optional[str] = Field(
        default=None, alias="conversationId", description="Conversation identifier"
    )


class ChatReply(BaseModel):
    """Buffered chat response."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="Assistant reply")
    conversation_id: str = Field(..., alias="conversationId")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    tools_loaded: int = Field(..., description="Number of loaded tools")


# =============================================================================
# Routes
# =============================================================================

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", tools_loaded=len(get_tool_registry()))


@router.post("/chat", tags=["Chat"])
async def chat(request: ChatRequest, user_id: str = Depends(get_current_user)):
    """Main chat endpoint.

    Guided creation workflows are answered locally; everything else goes to
    the model with the registered tools.
    """
    if not get_config().llm.api_key:
        logger.error("[CHAT] Rejecting request: ANTHROPIC_API_KEY is not configured")
        raise HTTPException(status_code=500, detail="ANTHROPIC_API_KEY is not configured")

    conversation_id = request.conversation_id or str(uuid.uuid4())
    messages = [message.model_dump() for message in request.messages]
    context = ToolContext(user_id=user_id, repositories=get_repositories())
    orchestrator = get_chat_orchestrator()

    last = messages[-1]["content"]
    logger.info(
        f"[CHAT] Request from user={user_id} conversation={conversation_id}: "
        f"{last[:100]}{'...' if len(last) > 100 else ''}"
    )

    if request.stream:
        return StreamingResponse(
            orchestrator.chat_streamed(messages, conversation_id, context),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Conversation-Id": conversation_id,
            },
        )

    try:
        reply = await orchestrator.chat(messages, conversation_id, context)
    except UpstreamTimeoutError as e:
        logger.error(f"[CHAT] Upstream timeout: {e}")
        raise HTTPException(status_code=504, detail="Upstream timeout")
    except ConfigurationError as e:
        logger.error(f"[CHAT] Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"[CHAT] Error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate response")

    logger.info(f"[CHAT] Response text: {reply[:150]}{'...' if len(reply) > 150 else ''}")
    return ChatReply(message=reply, conversation_id=conversation_id).model_dump(by_alias=True)


@router.get("/tools", tags=["System"])
async def list_tools(user_id: str = Depends(get_current_user)):
    """List all registered tools and their schemas."""
    registry = get_tool_registry()

    return {
        "count": len(registry),
        "tools": [
            {
                "name": entry.name,
                "description": entry.description,
                "schema": entry.input_schema,
            }
            for entry in registry.values()
        ],
    }
