"""Schemas for the chat endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /chat and POST /chat/{thread_id}. History is stored server-side by thread id."""

    message: str = Field(..., min_length=1, description="User message for the agent.")


class ChatResponse(BaseModel):
    """Response for both chat endpoints."""

    thread_id: str = Field(..., description="Thread the message was processed on; reuse it to continue the conversation.")
    response: str = Field(..., description="Final assistant message for this turn.")


class HistoryResponse(BaseModel):
    """Persisted messages of a thread (user, assistant and tool results)."""

    thread_id: str
    messages: list[dict[str, Any]] = Field(default_factory=list)
