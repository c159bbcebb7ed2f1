"""
Unit tests for the OpenAI chat wrapper with a stubbed client.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from swappy.agent.llm import ChatModel, parse_tool_arguments
from swappy.agent.tools import VECTOR_SEARCH_TOOL
from swappy.core.config import Settings


def _client(message: SimpleNamespace) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)]))
    return client


def test_plain_answer() -> None:
    client = _client(SimpleNamespace(content="Hello!", tool_calls=None))
    model = ChatModel(Settings(openai_model="gpt-test"), client=client)
    out = asyncio.run(model.invoke([{"role": "user", "content": "hi"}], [VECTOR_SEARCH_TOOL]))
    assert out == {"role": "assistant", "content": "Hello!"}
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["temperature"] == 0.0
    assert kwargs["tools"] == [VECTOR_SEARCH_TOOL]


def test_tool_calls_kept_in_wire_form() -> None:
    call = SimpleNamespace(id="call-1", function=SimpleNamespace(name="vector_search", arguments='{"query": "bali"}'))
    client = _client(SimpleNamespace(content=None, tool_calls=[call]))
    out = asyncio.run(ChatModel(Settings(), client=client).invoke([], [VECTOR_SEARCH_TOOL]))
    assert out == {
        "role": "assistant",
        "content": "",
        "tool_calls": [
            {"id": "call-1", "type": "function", "function": {"name": "vector_search", "arguments": '{"query": "bali"}'}}
        ],
    }


def test_parse_tool_arguments() -> None:
    assert parse_tool_arguments('{"query": "x", "n": 2}') == {"query": "x", "n": 2}
    assert parse_tool_arguments("not json") == {}
    assert parse_tool_arguments("[1, 2]") == {}
    assert parse_tool_arguments(None) == {}
    assert parse_tool_arguments({"query": "y"}) == {"query": "y"}


def test_tool_result_name_not_sent_to_model() -> None:
    client = _client(SimpleNamespace(content="Found it.", tool_calls=None))
    history = [
        {"role": "user", "content": "bali projects"},
        {"role": "tool", "tool_call_id": "call-1", "name": "vector_search", "content": "{}"},
    ]
    asyncio.run(ChatModel(Settings(), client=client).invoke(history, [VECTOR_SEARCH_TOOL]))
    sent = client.chat.completions.create.call_args.kwargs["messages"]
    assert sent[1] == {"role": "tool", "tool_call_id": "call-1", "content": "{}"}
    assert history[1]["name"] == "vector_search"
