"""
Search-hit normalization: map heterogeneous stored records to one summary shape.

Each hit is classified once (SourceKind) from its source discriminator and
metadata, then summarized by the matching pure function. Normalization never
raises; missing fields are left out of the summary.
"""

from enum import Enum
from typing import Any, Callable, Mapping

from swappy.core.config import NAME_EXCERPT_CHARS, SUMMARY_EXCERPT_CHARS
from swappy.services.documents import Document


class SourceKind(str, Enum):
    PROJECT = "project"
    TABULAR_ROW = "tabular_row"
    DOCUMENT_CHUNK = "document_chunk"
    UNKNOWN = "unknown"


PROJECT_SOURCE = "dummyProjects"
CSV_SOURCE = "csv"
MARKDOWN_SOURCE = "markdown"


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _content(doc: Document) -> str:
    content = doc.page_content
    return content if isinstance(content, str) else ""


def _first(*values: Any) -> Any:
    """First value that is not None (nullish coalescing)."""
    for v in values:
        if v is not None:
            return v
    return None


def _present(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (int, float)) and value == 0:
        return False
    return True


def _text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def resolve_source(doc: Document) -> str:
    """metadata.source, else a source field on the record itself, else 'unknown'."""
    meta = _as_mapping(doc.metadata)
    source = _first(meta.get("source"), _as_mapping(doc.fields).get("source"))
    if source is None or not str(source).strip():
        return "unknown"
    return str(source)


def resolve_kind(doc: Document, source: str | None = None) -> SourceKind:
    source = source if source is not None else resolve_source(doc)
    meta = _as_mapping(doc.metadata)
    if source == PROJECT_SOURCE or isinstance(meta.get("raw"), Mapping):
        return SourceKind.PROJECT
    if source == CSV_SOURCE or isinstance(meta.get("row"), Mapping):
        return SourceKind.TABULAR_ROW
    if source == MARKDOWN_SOURCE:
        return SourceKind.DOCUMENT_CHUNK
    return SourceKind.UNKNOWN


def resolve_id(doc: Document) -> str | None:
    """metadata._id, else the record id, else a top-level _id field."""
    value = _first(
        _as_mapping(doc.metadata).get("_id"),
        doc.id,
        _as_mapping(doc.fields).get("_id"),
    )
    return None if value is None else str(value)


def _compose(head: str, parts: list[tuple[str, Any, str]]) -> str:
    """head, then ' | Label: value[suffix]' for each present value, in order."""
    out = head.strip()
    for label, value, suffix in parts:
        if _present(value):
            out += f" | {label}: {_text(value)}{suffix}"
    return out


def summarize_project(doc: Document) -> str:
    meta = _as_mapping(doc.metadata)
    raw = _as_mapping(_first(meta.get("raw"), _as_mapping(doc.fields).get("raw")))
    name = _first(
        raw.get("projectName"),
        raw.get("ProjectName"),
        meta.get("projectName"),
        _content(doc)[:NAME_EXCERPT_CHARS],
    )
    location = _first(raw.get("location"), raw.get("Location"), meta.get("location"))
    sequestration = _first(
        raw.get("carbonSequestration"), raw.get("sequestration"), meta.get("carbonSequestration")
    )
    price = _first(raw.get("price"), raw.get("Price"), meta.get("price"))
    stock = _first(raw.get("stock"), raw.get("Stock"), meta.get("stock"))
    head = f"Project: {_text(name)}" if _present(name) else "Project:"
    return _compose(
        head,
        [
            ("Location", location, ""),
            ("Est. sequestration", sequestration, ""),
            ("Price", price, ""),
            ("Stock", stock, ""),
        ],
    )


def summarize_row(doc: Document) -> str:
    meta = _as_mapping(doc.metadata)
    row = _as_mapping(_first(meta.get("row"), _as_mapping(doc.fields).get("row")))
    name = _first(row.get("nama_lokasi"), row.get("name"), _content(doc)[:NAME_EXCERPT_CHARS])
    area = _first(row.get("luas_ha"), row.get("luas"), row.get("area"))
    carbon = _first(row.get("karbon_terserap"), row.get("karbon"), row.get("carbon"))
    rating = _first(row.get("rating_ulasan"), row.get("rating"))
    head = f"Location: {_text(name)}" if _present(name) else "Location:"
    return _compose(
        head,
        [
            ("Area", area, " ha"),
            ("Carbon captured", carbon, ""),
            ("Rating", rating, ""),
        ],
    )


def summarize_chunk(doc: Document) -> str:
    snippet = " ".join(_content(doc).split("\n")[:3]).strip()
    return f"Doc: {snippet}" if snippet else "Doc:"


def summarize_other(doc: Document) -> str:
    return _content(doc)[:SUMMARY_EXCERPT_CHARS]


_SUMMARIZERS: dict[SourceKind, Callable[[Document], str]] = {
    SourceKind.PROJECT: summarize_project,
    SourceKind.TABULAR_ROW: summarize_row,
    SourceKind.DOCUMENT_CHUNK: summarize_chunk,
    SourceKind.UNKNOWN: summarize_other,
}


def normalize(doc: Document, score: float) -> dict[str, Any]:
    """Map one (document, score) hit to {id, score, source, summary, full}."""
    source = resolve_source(doc)
    kind = resolve_kind(doc, source)
    summary = _SUMMARIZERS[kind](doc)
    if not summary.strip():
        summary = f"{source} result"
    return {
        "id": resolve_id(doc),
        "score": score,
        "source": source,
        "summary": summary,
        "full": doc.to_payload(),
    }
