"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading and environment variables. The owning
process builds one Settings via Settings.from_env() and passes it into the
components it constructs; core modules never read the environment themselves.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from swappy.core.errors import ConfigurationError

load_dotenv()

# OpenAI (agent LLM)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
LLM_TEMPERATURE: float = 0.0
LLM_API_TIMEOUT: float = 60.0

# Hugging Face (query/document embeddings)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
EMBED_API_TIMEOUT: float = 30.0
EMBED_BATCH_SIZE: int = 32

# Vector dim for all-MiniLM-L6-v2
VECTOR_DIM: int = 384

# Milvus Cloud
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()
COLLECTION_NAME: str = os.getenv("COLLECTION_NAME", "items").strip() or "items"

# vector_search tool
DEFAULT_SEARCH_RESULTS: int = 6
SUMMARY_EXCERPT_CHARS: int = 150
NAME_EXCERPT_CHARS: int = 80

# Backoff on upstream 429s (milliseconds)
MAX_RETRY_ATTEMPTS: int = 3
RETRY_BASE_DELAY_MS: int = 1000
RETRY_MAX_DELAY_MS: int = 30000

# Agent loop: max decide/execute cycles per turn
MAX_AGENT_CYCLES: int = 12

# Chunking for seeded markdown docs
CHUNK_SIZE: int = 500
CHUNK_OVERLAP: int = 50

PORT: int = int(os.getenv("PORT", "8000") or 8000)


class Settings(BaseModel):
    """Explicit runtime configuration threaded into the collection, model and controller."""

    model_config = ConfigDict(frozen=True)

    openai_api_key: str = ""
    openai_model: str = OPENAI_LLM_MODEL
    temperature: float = LLM_TEMPERATURE
    llm_timeout: float = LLM_API_TIMEOUT

    hf_api_key: str = ""
    hf_embed_model: str = HF_EMBED_MODEL
    embed_timeout: float = EMBED_API_TIMEOUT
    embed_batch_size: int = Field(default=EMBED_BATCH_SIZE, ge=1)
    vector_dim: int = VECTOR_DIM

    milvus_uri: str = ""
    milvus_token: str = ""
    collection_name: str = COLLECTION_NAME

    default_search_results: int = Field(default=DEFAULT_SEARCH_RESULTS, ge=1)
    max_retry_attempts: int = Field(default=MAX_RETRY_ATTEMPTS, ge=1)
    max_agent_cycles: int = Field(default=MAX_AGENT_CYCLES, ge=1)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the values loaded out of the environment / .env."""
        return cls(
            openai_api_key=OPENAI_API_KEY,
            openai_model=OPENAI_LLM_MODEL,
            hf_api_key=HF_API_KEY,
            milvus_uri=MILVUS_URI,
            milvus_token=MILVUS_TOKEN,
            collection_name=COLLECTION_NAME,
        )

    def require_credentials(self) -> None:
        """Raise ConfigurationError when a credential the agent cannot run without is missing."""
        if not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable is required")
