# Run from project root: uvicorn swappy.main:app --reload

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from swappy.agent.graph import TurnController
from swappy.agent.llm import ChatModel
from swappy.agent.tools import ToolExecutor, VectorSearchTool
from swappy.api.routes import router
from swappy.core.config import Settings
from swappy.core.session_store import build_checkpointer
from swappy.mcp.server import mcp_router
from swappy.services.vector_store import MilvusDocumentCollection

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_components(settings: Settings) -> tuple[TurnController, ToolExecutor]:
    """Wire collection, tool, model and controller from one Settings instance."""
    collection = MilvusDocumentCollection(settings)
    search_tool = VectorSearchTool(
        collection,
        default_n=settings.default_search_results,
        max_attempts=settings.max_retry_attempts,
    )
    executor = ToolExecutor(search_tool)
    controller = TurnController(
        ChatModel(settings),
        executor,
        checkpointer=build_checkpointer(),
        max_cycles=settings.max_agent_cycles,
        max_attempts=settings.max_retry_attempts,
    )
    return controller, executor


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings.from_env()
    settings.require_credentials()
    app.state.controller, app.state.tool_executor = build_components(settings)
    logger.info("Swappy agent ready (model=%s collection=%s)", settings.openai_model, settings.collection_name)
    yield


app = FastAPI(title="Swappy Agent Server", lifespan=lifespan)
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")


if __name__ == "__main__":
    import uvicorn

    from swappy.core.config import PORT

    uvicorn.run("swappy.main:app", host="0.0.0.0", port=PORT)
