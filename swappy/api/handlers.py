"""
API handlers: resolve app-scoped components and map agent errors to HTTP.

Responsibility: Bridge HTTP types and the agent. Both chat endpoints go through
handle_chat so a failure produces the same status and detail on each.
"""

import logging

from fastapi import HTTPException, Request

from swappy.agent.graph import TurnController
from swappy.agent.tools import ToolExecutor
from swappy.core.errors import AgentError, RateLimitedError
from swappy.schemas.chat import ChatResponse

logger = logging.getLogger(__name__)


def get_controller(request: Request) -> TurnController:
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="Agent is not initialized.")
    return controller


def get_tool_executor(request: Request) -> ToolExecutor:
    executor = getattr(request.app.state, "tool_executor", None)
    if executor is None:
        raise HTTPException(status_code=503, detail="Tools are not initialized.")
    return executor


async def handle_chat(controller: TurnController, message: str, thread_id: str) -> ChatResponse:
    """Run one turn; RateLimitedError → 429, any other AgentError → 500 with its message."""
    try:
        response = await controller.run_turn(message, thread_id)
    except RateLimitedError as e:
        logger.warning("[api:chat] rate limited thread_id=%s", thread_id)
        raise HTTPException(status_code=429, detail=e.message) from e
    except AgentError as e:
        logger.exception("[api:chat] agent failed thread_id=%s", thread_id)
        raise HTTPException(status_code=500, detail=e.message) from e
    return ChatResponse(thread_id=thread_id, response=response)
