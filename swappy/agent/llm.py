"""
Agent LLM: OpenAI chat completions with tool calling.

The SDK's own retries are disabled; rate limits are retried by the agent loop's
backoff so there is one retry policy for the generation call.
"""

import json
import logging
from typing import Any

from openai import AsyncOpenAI

from swappy.core.config import Settings

logger = logging.getLogger(__name__)


def parse_tool_arguments(raw: Any) -> dict[str, Any]:
    """Tool-call arguments as a dict; invalid JSON or non-object payloads become {}."""
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {}
    return args if isinstance(args, dict) else {}


def to_wire(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """History messages as the chat API accepts them; tool results carry no name."""
    return [
        {k: v for k, v in m.items() if k != "name"} if m.get("role") == "tool" else m
        for m in messages
    ]


class ChatModel:
    """Async OpenAI chat model; returns assistant messages in OpenAI wire form."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        self.model = settings.openai_model
        self.temperature = settings.temperature
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.llm_timeout,
            max_retries=0,
        )

    async def invoke(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]]) -> dict[str, Any]:
        """
        One chat completion. Returns {"role": "assistant", "content": str} plus
        "tool_calls" (id/type/function{name, arguments}) when the model requested tools.
        """
        logger.info("[llm:invoke] IN  messages=%d tools=%s", len(messages), [t["function"]["name"] for t in tools])
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": to_wire(messages),
            "temperature": self.temperature,
        }
        if tools:
            kwargs["tools"] = tools
        response = await self.client.chat.completions.create(**kwargs)
        msg = response.choices[0].message if response.choices else None
        content = (getattr(msg, "content", None) or "") if msg else ""
        out: dict[str, Any] = {"role": "assistant", "content": content}

        tool_calls = []
        for tc in (getattr(msg, "tool_calls", None) or []) if msg else []:
            fn = getattr(tc, "function", None)
            if not fn:
                continue
            tool_calls.append({
                "id": getattr(tc, "id", None) or "",
                "type": "function",
                "function": {
                    "name": getattr(fn, "name", None) or "",
                    "arguments": getattr(fn, "arguments", None) or "{}",
                },
            })
        if tool_calls:
            out["tool_calls"] = tool_calls
            logger.info("[llm:invoke] OUT tool_calls=%s", [t["function"]["name"] for t in tool_calls])
        else:
            logger.info("[llm:invoke] OUT content_len=%d", len(content))
        return out
