"""
Seed loaders: files → Documents tagged with the source the normalizer branches on.

.json  list of project objects      → source "dummyProjects", metadata.raw
.csv   one location per row         → source "csv", metadata.row
.md    marketplace / compliance doc → source "markdown", cleaned + chunked
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any

from swappy.core.config import CHUNK_OVERLAP, CHUNK_SIZE
from swappy.ingest.text_processing import chunk_text, clean_text
from swappy.services.documents import Document
from swappy.services.normalizer import CSV_SOURCE, MARKDOWN_SOURCE, PROJECT_SOURCE

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset({".json", ".csv", ".md", ".markdown"})


def _describe(record: dict[str, Any]) -> str:
    """key: value lines, used as the embedded text of structured records."""
    return "\n".join(f"{k}: {v}" for k, v in record.items() if v not in (None, ""))


def _coerce(value: str) -> Any:
    value = value.strip()
    if value == "":
        return None
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def load_projects(path: Path) -> list[Document]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("projects") or [data]
    docs = []
    for item in data:
        if not isinstance(item, dict):
            continue
        docs.append(Document(
            page_content=_describe(item),
            metadata={"source": PROJECT_SOURCE, "raw": item},
        ))
    logger.info("[loader:load_projects] %s -> %d documents", path.name, len(docs))
    return docs


def load_csv_rows(path: Path) -> list[Document]:
    docs = []
    with open(path, encoding="utf-8", newline="") as f:
        for row in csv.DictReader(f):
            values = {k.strip(): _coerce(v or "") for k, v in row.items() if k}
            docs.append(Document(
                page_content=_describe(values),
                metadata={"source": CSV_SOURCE, "row": values, "file": path.name},
            ))
    logger.info("[loader:load_csv_rows] %s -> %d documents", path.name, len(docs))
    return docs


def load_markdown(path: Path, chunk_size: int = CHUNK_SIZE, overlap: int = CHUNK_OVERLAP) -> list[Document]:
    text = clean_text(path.read_text(encoding="utf-8", errors="replace"))
    chunks = chunk_text(text, chunk_size=chunk_size, overlap=overlap)
    docs = [
        Document(
            page_content=chunk,
            metadata={"source": MARKDOWN_SOURCE, "file": path.name, "chunk_id": i},
        )
        for i, chunk in enumerate(chunks)
    ]
    logger.info("[loader:load_markdown] %s -> %d chunks", path.name, len(docs))
    return docs


def load_path(path: str | Path) -> list[Document]:
    """Load one seed file by extension; unsupported extensions raise ValueError."""
    path = Path(path)
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported seed file {path.name!r}; expected one of {sorted(SUPPORTED_EXTENSIONS)}")
    if ext == ".json":
        return load_projects(path)
    if ext == ".csv":
        return load_csv_rows(path)
    return load_markdown(path)
