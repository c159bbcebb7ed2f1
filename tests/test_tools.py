"""
Unit tests for the vector_search tool and tool dispatch.
"""

import asyncio
import json

from swappy.agent.tools import VECTOR_SEARCH_TOOL, ToolExecutor, VectorSearchTool, coerce_n

from conftest import FakeCollection, FakeHTTPError


def _search(tool: VectorSearchTool, query: str, n: int | None = None) -> dict:
    return json.loads(asyncio.run(tool.search(query, n)))


def test_empty_collection_short_circuits() -> None:
    empty = FakeCollection(total=0)
    envelope = _search(VectorSearchTool(empty), "mangrove")
    assert envelope["error"] == "empty_db"
    assert envelope["count"] == 0
    assert envelope["query"] == "mangrove"
    assert empty.search_calls == []


def test_returns_normalized_results_in_score_order(collection: FakeCollection) -> None:
    envelope = _search(VectorSearchTool(collection), "mangrove", 3)
    assert envelope["searchType"] == "vector"
    assert envelope["query"] == "mangrove"
    assert envelope["count"] == 3
    assert len(envelope["results"]) == 3
    assert [r["score"] for r in envelope["results"]] == [0.93, 0.88, 0.71]
    assert envelope["results"][0]["summary"] == "Project: Mangrove Bay | Location: Bali | Price: 50"
    assert envelope["results"][0]["id"] == "mangrove-bay"
    assert collection.search_calls == [("mangrove", 3)]


def test_default_n_is_six(collection: FakeCollection) -> None:
    _search(VectorSearchTool(collection), "anything")
    assert collection.search_calls == [("anything", 6)]


def test_search_failure_becomes_error_envelope() -> None:
    broken = FakeCollection(total=5, error=RuntimeError("index unavailable"))
    envelope = _search(VectorSearchTool(broken), "peat")
    assert envelope == {"error": "search_error", "message": "index unavailable", "query": "peat"}


def test_count_failure_becomes_error_envelope() -> None:
    class CountFails(FakeCollection):
        async def count(self) -> int:
            raise ConnectionError("milvus down")

    envelope = _search(VectorSearchTool(CountFails()), "peat")
    assert envelope["error"] == "search_error"
    assert envelope["message"] == "milvus down"


def test_exhausted_rate_limit_becomes_error_envelope() -> None:
    limited = FakeCollection(total=5, error=FakeHTTPError(429))
    envelope = _search(VectorSearchTool(limited, max_attempts=1), "peat")
    assert envelope["error"] == "search_error"
    assert envelope["message"] == "Max retries exceeded"
    assert len(limited.search_calls) == 1


def test_rate_limited_search_succeeds_on_retry(collection: FakeCollection, monkeypatch) -> None:
    class LimitedOnce(FakeCollection):
        async def similarity_search_with_score(self, query: str, k: int):
            if not self.search_calls:
                self.search_calls.append((query, k))
                raise FakeHTTPError(429)
            return await super().similarity_search_with_score(query, k)

    monkeypatch.setattr("swappy.core.retry.backoff_delay_ms", lambda attempt: 0)
    flaky = LimitedOnce(collection.hits)
    envelope = _search(VectorSearchTool(flaky, max_attempts=3), "mangrove", 2)
    assert envelope["searchType"] == "vector"
    assert envelope["count"] == 2
    assert len(flaky.search_calls) == 2


class TestToolExecutor:
    def test_specs_expose_only_vector_search(self, executor: ToolExecutor) -> None:
        assert executor.specs == [VECTOR_SEARCH_TOOL]
        params = VECTOR_SEARCH_TOOL["function"]["parameters"]
        assert params["required"] == ["query"]
        assert params["properties"]["n"]["default"] == 6

    def test_dispatches_vector_search(self, executor: ToolExecutor, collection: FakeCollection) -> None:
        result = json.loads(asyncio.run(executor.execute_tool("vector_search", {"query": " bali ", "n": "2"})))
        assert result["count"] == 2
        assert collection.search_calls == [("bali", 2)]

    def test_unknown_tool(self, executor: ToolExecutor) -> None:
        result = json.loads(asyncio.run(executor.execute_tool("web_search", {"query": "x"})))
        assert result["error"] == "unknown_tool"


def test_coerce_n() -> None:
    assert coerce_n(None) == 6
    assert coerce_n("3") == 3
    assert coerce_n("many") == 6
    assert coerce_n(0) == 1
    assert coerce_n(True) == 6
