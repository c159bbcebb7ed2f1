"""
Vector store client: Milvus Cloud collection, embeddings (HF Inference API), similarity search.

Responsibility: Embed texts via all-MiniLM-L6-v2, store seeded records with their
source/metadata, count records and run scored similarity search for the
vector_search tool.
"""

import asyncio
import json
import logging
from typing import Any, Protocol

import httpx

from swappy.core.config import Settings
from swappy.core.errors import UpstreamError
from swappy.services.documents import Document

logger = logging.getLogger(__name__)

OUTPUT_FIELDS = ["text", "source", "metadata"]


class DocumentCollection(Protocol):
    """What the vector_search tool needs from the document collection."""

    async def count(self) -> int: ...

    async def similarity_search_with_score(self, query: str, k: int) -> list[tuple[Document, float]]: ...


def _hf_urls(model: str) -> list[str]:
    return [
        f"https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction",
        f"https://api-inference.huggingface.co/models/{model}",
    ]


def embed_texts(texts: list[str], settings: Settings) -> list[list[float]]:
    """
    Batch embed texts using the Hugging Face Inference API.

    Returns one normalized vector per text (cosine similarity in Milvus).
    Error statuses are raised as UpstreamError with the HTTP status attached so
    a 429 can be retried by the caller.
    """
    if not texts:
        return []
    if not settings.hf_api_key:
        raise UpstreamError(
            "HF_API_KEY must be set in .env. Get a token from https://huggingface.co/settings/tokens",
            status_code=401,
        )

    headers = {
        "Authorization": f"Bearer {settings.hf_api_key}",
        "Content-Type": "application/json",
    }
    api_urls = _hf_urls(settings.hf_embed_model)
    all_embeddings: list[list[float]] = []

    with httpx.Client(timeout=settings.embed_timeout) as client:
        for i in range(0, len(texts), settings.embed_batch_size):
            batch = texts[i : i + settings.embed_batch_size]
            payload = {"inputs": batch, "options": {"wait_for_model": True}}
            response = None

            for api_url in api_urls:
                response = client.post(api_url, json=payload, headers=headers)
                # router rejects some tokens with 403; the standard endpoint may still accept them
                if response.status_code == 403 and api_url != api_urls[-1]:
                    continue
                break

            if response is None or response.status_code != 200:
                status = response.status_code if response is not None else None
                detail = response.text[:200] if response is not None else "no response"
                logger.warning("[vector_store:embed_texts] HF error status=%s detail=%r", status, detail)
                if status == 503:
                    raise UpstreamError(f"HF model is loading. Retry later. {detail}", status_code=503)
                raise UpstreamError(f"HF API error: {detail}", status_code=status)

            result = response.json()
            if isinstance(result, list) and result and isinstance(result[0], list):
                batch_emb = result
            else:
                batch_emb = [
                    item if isinstance(item, list) else [item]
                    for item in (result if isinstance(result, list) else [result])
                ]

            for vec in batch_emb:
                norm = sum(x * x for x in vec) ** 0.5
                if norm == 0:
                    norm = 1.0
                all_embeddings.append([x / norm for x in vec])

    return all_embeddings


def get_milvus_client(settings: Settings, create: bool = True) -> Any:
    """
    Connect to Milvus Cloud and return a client. Creates the collection (COSINE,
    dynamic fields for metadata) if it does not exist and create is set.
    """
    if not settings.milvus_uri or not settings.milvus_token:
        raise ValueError("MILVUS_URI and MILVUS_TOKEN must be set in .env")

    from pymilvus import MilvusClient

    client = MilvusClient(uri=settings.milvus_uri, token=settings.milvus_token)
    logger.info("Milvus connection established")

    if create and not client.has_collection(settings.collection_name):
        client.create_collection(
            collection_name=settings.collection_name,
            dimension=settings.vector_dim,
            primary_field_name="id",
            vector_field_name="vector",
            metric_type="COSINE",
            auto_id=True,
            enable_dynamic_field=True,
        )
        logger.info("Created Milvus collection %s", settings.collection_name)
    return client


def _metadata_of(entity: dict) -> dict:
    meta = entity.get("metadata")
    if isinstance(meta, str):
        try:
            meta = json.loads(meta)
        except json.JSONDecodeError:
            meta = {}
    return dict(meta) if isinstance(meta, dict) else {}


def hit_to_document(hit: dict) -> tuple[Document, float]:
    """Milvus search hit ({id, distance, entity}) -> (Document, score). COSINE distance is a similarity."""
    entity = hit.get("entity") or hit
    meta = _metadata_of(entity)
    fields = {}
    if entity.get("source"):
        fields["source"] = entity["source"]
        meta.setdefault("source", entity["source"])
    pk = hit.get("id", entity.get("id"))
    doc = Document(
        page_content=entity.get("text") or "",
        metadata=meta,
        id=None if pk is None else str(pk),
        fields=fields,
    )
    return doc, float(hit.get("distance", hit.get("score", 0.0)))


def store_documents(documents: list[Document], settings: Settings) -> int:
    """Embed documents and insert them (text, source, metadata). Returns the number stored."""
    if not documents:
        return 0
    embeddings = embed_texts([d.page_content for d in documents], settings)
    client = get_milvus_client(settings)
    rows = []
    for doc, emb in zip(documents, embeddings):
        rows.append({
            "vector": emb,
            "text": doc.page_content,
            "source": str(doc.metadata.get("source", "")),
            "metadata": doc.metadata,
        })
    client.insert(collection_name=settings.collection_name, data=rows)
    client.flush(collection_name=settings.collection_name)
    logger.info("Embedded and stored %d documents", len(rows))
    return len(rows)


def clear_collection(settings: Settings) -> None:
    """Drop the collection; it is recreated empty on the next insert."""
    client = get_milvus_client(settings, create=False)
    if client.has_collection(settings.collection_name):
        client.drop_collection(collection_name=settings.collection_name)
        logger.info("Collection %s dropped", settings.collection_name)


class MilvusDocumentCollection:
    """DocumentCollection backed by Milvus. Blocking client calls run in a worker thread."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = get_milvus_client(self.settings, create=False)
        return self._client

    def _count(self) -> int:
        client = self._get_client()
        name = self.settings.collection_name
        if not client.has_collection(name):
            return 0
        stats = client.get_collection_stats(collection_name=name)
        return int(stats.get("row_count", 0))

    def _search(self, query: str, k: int) -> list[tuple[Document, float]]:
        logger.info("[vector_store:search] IN  query=%r k=%d", query, k)
        query_vec = embed_texts([query], self.settings)
        results = self._get_client().search(
            collection_name=self.settings.collection_name,
            data=query_vec,
            limit=k,
            output_fields=OUTPUT_FIELDS,
        )
        hits = results[0] if results else []
        pairs = [hit_to_document(h) for h in hits]
        logger.info("[vector_store:search] OUT hits=%d scores=%s", len(pairs), [round(s, 4) for _, s in pairs[:5]])
        return pairs

    async def count(self) -> int:
        return await asyncio.to_thread(self._count)

    async def similarity_search_with_score(self, query: str, k: int) -> list[tuple[Document, float]]:
        return await asyncio.to_thread(self._search, query, k)
