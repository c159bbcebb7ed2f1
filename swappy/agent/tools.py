"""
Agent tools: definition and execution of vector_search for tool-calling mode.

vector_search runs a semantic search over carbon projects, location rows and
marketplace/compliance docs, normalizes every hit and returns a JSON envelope.
Tool failures are returned as envelopes, never raised, so one bad search does
not abort the turn.
"""

import json
import logging
from typing import Any

from swappy.core.config import DEFAULT_SEARCH_RESULTS, MAX_RETRY_ATTEMPTS
from swappy.core.retry import execute_with_backoff
from swappy.services.normalizer import normalize
from swappy.services.vector_store import DocumentCollection

logger = logging.getLogger(__name__)

VECTOR_SEARCH = "vector_search"

# OpenAI function-calling format
VECTOR_SEARCH_TOOL = {
    "type": "function",
    "function": {
        "name": VECTOR_SEARCH,
        "description": (
            "Performs semantic search over carbon projects, locations, and documentation. "
            "Use when user asks about specific projects, locations, sequestration numbers, "
            "price/stock, or asks 'show me' type queries."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (project name, location, metric, etc.)",
                },
                "n": {
                    "type": "integer",
                    "description": "Max results to return",
                    "default": DEFAULT_SEARCH_RESULTS,
                },
            },
            "required": ["query"],
        },
    },
}


def _dumps(payload: dict) -> str:
    return json.dumps(payload, default=str, ensure_ascii=False)


def coerce_n(value: Any, default: int = DEFAULT_SEARCH_RESULTS) -> int:
    """Model-supplied n as a positive int; anything unusable falls back to the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return max(n, 1)


class VectorSearchTool:
    """The vector_search capability over one document collection."""

    name = VECTOR_SEARCH
    spec = VECTOR_SEARCH_TOOL

    def __init__(
        self,
        collection: DocumentCollection,
        default_n: int = DEFAULT_SEARCH_RESULTS,
        max_attempts: int = MAX_RETRY_ATTEMPTS,
    ) -> None:
        self.collection = collection
        self.default_n = default_n
        self.max_attempts = max_attempts

    async def search(self, query: str, n: int | None = None) -> str:
        """Return the JSON envelope for query: results, empty_db or search_error."""
        n = self.default_n if n is None else n
        logger.info('[vector_search] query="%s" n=%d', query, n)
        try:
            total = await self.collection.count()
            if total == 0:
                logger.info("[vector_search] empty collection, skipping search")
                return _dumps({
                    "error": "empty_db",
                    "message": "No indexed documents found",
                    "query": query,
                    "count": 0,
                })

            raw_results = await execute_with_backoff(
                lambda: self.collection.similarity_search_with_score(query, n),
                self.max_attempts,
            )
            normalized = [normalize(doc, score) for doc, score in raw_results]
            logger.info("[vector_search] OUT count=%d sources=%s", len(normalized), [r["source"] for r in normalized])
            return _dumps({
                "results": normalized,
                "searchType": "vector",
                "query": query,
                "count": len(normalized),
            })
        except Exception as e:
            logger.error("[vector_search] error: %s", e, exc_info=True)
            return _dumps({
                "error": "search_error",
                "message": str(e) or e.__class__.__name__,
                "query": query,
            })


class ToolExecutor:
    """Registry of tools the model may call, keyed by function name."""

    def __init__(self, search_tool: VectorSearchTool) -> None:
        self.search_tool = search_tool

    @property
    def specs(self) -> list[dict[str, Any]]:
        return [self.search_tool.spec]

    async def execute_tool(self, name: str, arguments: dict[str, Any] | None) -> str:
        """
        Execute a tool by name with the given arguments. Returns a string result for the LLM.
        """
        args = arguments or {}
        logger.info("[tools] execute_tool name=%r arguments=%r", name, args)

        if name == VECTOR_SEARCH:
            query = str(args.get("query") or "").strip()
            n = coerce_n(args.get("n"), self.search_tool.default_n)
            return await self.search_tool.search(query, n)

        return _dumps({"error": "unknown_tool", "message": f"Unknown tool: {name}"})
