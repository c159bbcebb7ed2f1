"""
Minimal MCP-style tool server: exposes vector_search through a standardized
tool interface so external agents get the same envelope the chat agent sees.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends

from swappy.agent.tools import VECTOR_SEARCH, VECTOR_SEARCH_TOOL, ToolExecutor
from swappy.api.handlers import get_tool_executor
from swappy.schemas.search import VectorSearchRequest

logger = logging.getLogger(__name__)

mcp_router = APIRouter(tags=["mcp"])


@mcp_router.get("/tools", summary="MCP tool discovery")
def mcp_list_tools() -> dict[str, list[dict[str, Any]]]:
    fn = VECTOR_SEARCH_TOOL["function"]
    return {
        "tools": [
            {
                "name": fn["name"],
                "description": fn["description"],
                "input_schema": fn["parameters"],
            }
        ]
    }


@mcp_router.post(
    "/tools/vector_search",
    summary="MCP tool: vector_search",
    description="Semantic search over projects, location rows and docs. Returns the results / empty_db / search_error envelope.",
)
async def mcp_vector_search(
    body: VectorSearchRequest,
    executor: ToolExecutor = Depends(get_tool_executor),
) -> dict[str, Any]:
    logger.info("MCP tool called: vector_search")
    query = (body.query or "").strip()
    if not query:
        return {"results": [], "searchType": "vector", "query": "", "count": 0}
    result = await executor.execute_tool(VECTOR_SEARCH, {"query": query, "n": body.n})
    return json.loads(result)
