"""Schemas for the MCP vector_search endpoint."""

from pydantic import BaseModel, Field

from swappy.core.config import DEFAULT_SEARCH_RESULTS


class VectorSearchRequest(BaseModel):
    """Request body for MCP tool vector_search."""

    query: str = ""
    n: int = Field(DEFAULT_SEARCH_RESULTS, ge=1, le=50, description="Max results to return.")
