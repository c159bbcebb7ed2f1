"""
LangGraph agent: agent (decide) → tools → agent … → END.

One turn appends the user message to the thread's history, calls the model
(system prompt + full history) and executes any requested tools until the model
answers without tool calls. Each agent visit is one cycle; a turn is capped at
max_cycles and fails with RecursionCapError past it.
"""

import logging
import operator
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, TypedDict

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.errors import GraphRecursionError
from langgraph.graph import END, START, StateGraph

from swappy.agent.llm import ChatModel, parse_tool_arguments
from swappy.agent.tools import ToolExecutor
from swappy.core.config import MAX_AGENT_CYCLES, MAX_RETRY_ATTEMPTS
from swappy.core.errors import (
    AgentError,
    AuthenticationError,
    MaxRetriesExceededError,
    RateLimitedError,
    RecursionCapError,
)
from swappy.core.retry import execute_with_backoff, has_status, is_rate_limited
from swappy.core.session_store import build_checkpointer, thread_config

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Swappy, a helpful Carbon Offset Chatbot Agent integrated into CarbonSwap (an ecommerce marketplace for carbon projects).

Your capabilities:
- Answer general or carbon questions directly (greetings, market, methodology, compliance basics, or unrelated topics).
- You have access to the tool "vector_search". Use it ONLY when the user requests project-specific, location-specific or numeric metrics, or asks to "show", "list", "recommend", "compare", or requests details about a named project or location.
- The database also holds documentation you can retrieve and cite:
  - "CarbonSwap" overview pages (site / product marketplace descriptions), and
  - "Carbon & Project Compliance" documents (legal, regulatory, and operational rules).
  Use them to explain marketplace features, quote or paraphrase compliance rules, and advise on required steps or references for due diligence.

- Before calling the tool, ask clarifying questions if the request lacks necessary filters (e.g. region, min sequestration, price range).
- After receiving tool results: summarize the top matches (project name or location), show key metadata (sequestration, price in US dollars per plot, stock, area per plot in hectares) when available, and suggest next steps (view project page, contact seller, ask for details).
- If the tool returns no results or an error, say so and offer other help, such as high-level guidance or broader search criteria.
- When you use content from the CarbonSwap or Compliance docs, label quoted/paraphrased material and name the source (e.g. "According to CarbonSwap overview..." or "Per Carbon & Project Compliance: ...").
- Decide whether a search is truly needed. Keep final responses concise and actionable, and say whether results came from search or general knowledge.

---
Current time: {time}"""


class TurnState(TypedDict):
    messages: Annotated[list, operator.add]  # OpenAI chat dicts: user / assistant / tool
    cycles: int


def build_system_message(now: datetime | None = None) -> dict[str, str]:
    now = now or datetime.now(timezone.utc)
    return {"role": "system", "content": SYSTEM_PROMPT.format(time=now.isoformat())}


class TurnController:
    """Runs one user turn against a thread's persisted history."""

    def __init__(
        self,
        chat_model: ChatModel,
        tool_executor: ToolExecutor,
        checkpointer: BaseCheckpointSaver | None = None,
        max_cycles: int = MAX_AGENT_CYCLES,
        max_attempts: int = MAX_RETRY_ATTEMPTS,
    ) -> None:
        self.chat_model = chat_model
        self.tool_executor = tool_executor
        self.checkpointer = checkpointer if checkpointer is not None else build_checkpointer()
        self.max_cycles = max_cycles
        self.max_attempts = max_attempts
        # two supersteps per cycle plus the capped re-entry; the explicit counter trips first
        self.recursion_limit = 2 * max_cycles + 4
        self.graph = self._build_graph()

    async def _call_model(self, state: TurnState) -> dict:
        """agent node: one model call over the full history, unless the cycle cap is reached."""
        cycles = state.get("cycles") or 0
        if cycles >= self.max_cycles:
            logger.warning("[graph:agent] cycle cap reached cycles=%d", cycles)
            raise RecursionCapError(self.max_cycles)
        history = list(state.get("messages") or [])
        logger.info("[graph:agent] IN  cycle=%d history_len=%d", cycles + 1, len(history))

        async def _invoke() -> dict[str, Any]:
            prompt = [build_system_message(), *history]
            return await self.chat_model.invoke(prompt, self.tool_executor.specs)

        response = await execute_with_backoff(_invoke, self.max_attempts)
        return {"messages": [response], "cycles": cycles + 1}

    async def _run_tools(self, state: TurnState) -> dict:
        """tools node: execute every tool call on the last assistant message, one result each."""
        messages = state.get("messages") or []
        last = messages[-1] if messages else {}
        results = []
        for tc in last.get("tool_calls") or []:
            fn = tc.get("function") or {}
            name = fn.get("name") or ""
            output = await self.tool_executor.execute_tool(name, parse_tool_arguments(fn.get("arguments")))
            results.append({"role": "tool", "tool_call_id": tc.get("id") or "", "name": name, "content": output})
        logger.info("[graph:tools] OUT results=%d", len(results))
        return {"messages": results}

    @staticmethod
    def _route_after_model(state: TurnState) -> Literal["tools", "__end__"]:
        messages = state.get("messages") or []
        last = messages[-1] if messages else None
        if last and last.get("tool_calls"):
            return "tools"
        return END

    def _build_graph(self):
        graph = StateGraph(TurnState)
        graph.add_node("agent", self._call_model)
        graph.add_node("tools", self._run_tools)
        graph.add_edge(START, "agent")
        graph.add_conditional_edges("agent", self._route_after_model, {"tools": "tools", END: END})
        graph.add_edge("tools", "agent")
        return graph.compile(checkpointer=self.checkpointer)

    async def run_turn(self, message: str, thread_id: str) -> str:
        """
        Process one user message on thread_id and return the final assistant text.

        Raises RecursionCapError, RateLimitedError, AuthenticationError, or
        AgentError wrapping any other failure.
        """
        logger.info("[graph:run_turn] START thread_id=%s message=%r", thread_id, message)
        config = thread_config(thread_id, recursion_limit=self.recursion_limit)
        initial = {"messages": [{"role": "user", "content": message}], "cycles": 0}
        try:
            final = await self.graph.ainvoke(initial, config)
        except AgentError:
            raise
        except GraphRecursionError as e:
            raise RecursionCapError(self.max_cycles) from e
        except MaxRetriesExceededError as e:
            raise RateLimitedError() from e
        except Exception as e:
            if is_rate_limited(e):
                raise RateLimitedError() from e
            if has_status(e, 401):
                raise AuthenticationError() from e
            raise AgentError(f"Agent error: {e}") from e

        messages = final.get("messages") or []
        last = messages[-1] if messages else {}
        response = last.get("content") or ""
        logger.info("[graph:run_turn] END thread_id=%s cycles=%d response_len=%d", thread_id, final.get("cycles") or 0, len(response))
        return response

    async def get_history(self, thread_id: str) -> list[dict[str, Any]]:
        """Persisted messages for thread_id; empty for an unknown thread."""
        snapshot = await self.graph.aget_state(thread_config(thread_id))
        values = snapshot.values if snapshot else {}
        return list((values or {}).get("messages") or [])
