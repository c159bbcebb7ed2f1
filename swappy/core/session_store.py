"""
Conversation store: per-thread message history kept by a LangGraph checkpointer.

The agent graph is compiled with this checkpointer, so every step of a turn is
saved under the thread id and the next turn on that thread starts from it.
Concurrent turns on the same thread id are not serialized here.
"""

import logging
from typing import Any

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import InMemorySaver

logger = logging.getLogger(__name__)


def build_checkpointer() -> BaseCheckpointSaver:
    """In-process checkpointer; history lives as long as the server process."""
    logger.info("[session_store] using in-memory checkpointer")
    return InMemorySaver()


def thread_config(thread_id: str, **extra: Any) -> dict[str, Any]:
    """Runnable config that keys checkpoints by thread id."""
    if not thread_id or not isinstance(thread_id, str):
        raise ValueError("thread_id is required")
    return {"configurable": {"thread_id": thread_id}, **extra}
