"""Shared fakes: a scripted chat model and an in-memory document collection."""

import json
from typing import Any, Callable

import pytest

from swappy.agent.tools import ToolExecutor, VectorSearchTool
from swappy.services.documents import Document


class FakeHTTPError(Exception):
    """Upstream error carrying an HTTP status, like the OpenAI / httpx errors."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"upstream returned {status_code}")
        self.status_code = status_code


class FakeCollection:
    def __init__(self, hits: list[tuple[Document, float]] | None = None, total: int | None = None, error: Exception | None = None) -> None:
        self.hits = hits or []
        self.total = len(self.hits) if total is None else total
        self.error = error
        self.count_calls = 0
        self.search_calls: list[tuple[str, int]] = []

    async def count(self) -> int:
        self.count_calls += 1
        return self.total

    async def similarity_search_with_score(self, query: str, k: int) -> list[tuple[Document, float]]:
        self.search_calls.append((query, k))
        if self.error is not None:
            raise self.error
        return self.hits[:k]


class ScriptedChatModel:
    """Returns (or raises) scripted responses in order; a callable script decides per call."""

    def __init__(self, script: list[Any] | Callable[[int], Any]) -> None:
        self.script = script
        self.calls: list[list[dict]] = []
        self.tools_seen: list[list[dict]] = []

    async def invoke(self, messages: list[dict], tools: list[dict]) -> dict:
        self.calls.append(list(messages))
        self.tools_seen.append(tools)
        index = len(self.calls) - 1
        item = self.script(index) if callable(self.script) else self.script[index]
        if isinstance(item, Exception):
            raise item
        return item


def assistant(content: str) -> dict:
    return {"role": "assistant", "content": content}


def tool_call(call_id: str, query: str, n: int | None = None) -> dict:
    args: dict[str, Any] = {"query": query}
    if n is not None:
        args["n"] = n
    return {
        "role": "assistant",
        "content": "",
        "tool_calls": [
            {"id": call_id, "type": "function", "function": {"name": "vector_search", "arguments": json.dumps(args)}}
        ],
    }


def project_hit(name: str, score: float, **raw: Any) -> tuple[Document, float]:
    return (
        Document(
            page_content=f"projectName: {name}",
            metadata={"source": "dummyProjects", "raw": {"projectName": name, **raw}},
            id=name.lower().replace(" ", "-"),
        ),
        score,
    )


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection(
        hits=[
            project_hit("Mangrove Bay", 0.93, location="Bali", price=50),
            project_hit("Peat Reserve", 0.88, location="Riau"),
            project_hit("Teak Hills", 0.71),
        ]
    )


@pytest.fixture
def executor(collection: FakeCollection) -> ToolExecutor:
    return ToolExecutor(VectorSearchTool(collection, max_attempts=1))
