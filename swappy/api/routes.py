"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging
import uuid

from fastapi import APIRouter, Depends

from swappy.agent.graph import TurnController
from swappy.api.handlers import get_controller, handle_chat
from swappy.schemas.chat import ChatRequest, ChatResponse, HistoryResponse

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Swappy agent server is running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Chat ---

@router.post(
    "/chat",
    response_model=ChatResponse,
    tags=["chat"],
    summary="Start a conversation",
    description="Creates a new thread, runs the agent on the first message and returns the thread id with the answer.",
)
async def start_chat(body: ChatRequest, controller: TurnController = Depends(get_controller)) -> ChatResponse:
    thread_id = uuid.uuid4().hex
    logger.info("[api:start_chat] IN  thread_id=%s message=%r", thread_id, body.message)
    return await handle_chat(controller, body.message, thread_id)


@router.post(
    "/chat/{thread_id}",
    response_model=ChatResponse,
    tags=["chat"],
    summary="Continue a conversation",
    description="Runs the agent on a follow-up message; the thread's stored history is included automatically.",
)
async def continue_chat(
    thread_id: str,
    body: ChatRequest,
    controller: TurnController = Depends(get_controller),
) -> ChatResponse:
    logger.info("[api:continue_chat] IN  thread_id=%s message=%r", thread_id, body.message)
    return await handle_chat(controller, body.message, thread_id)


@router.get(
    "/chat/{thread_id}/history",
    response_model=HistoryResponse,
    tags=["chat"],
    summary="Stored messages of a thread",
)
async def chat_history(thread_id: str, controller: TurnController = Depends(get_controller)) -> HistoryResponse:
    messages = await controller.get_history(thread_id)
    return HistoryResponse(thread_id=thread_id, messages=messages)
