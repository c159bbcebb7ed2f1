"""Stored record shape shared by the vector store, the loaders and the normalizer."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Document:
    """One record in the document collection."""

    page_content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    # top-level stored fields besides content/metadata (e.g. source, raw, row, _id)
    fields: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Full payload as handed to the model in search results."""
        payload: dict[str, Any] = dict(self.fields) if isinstance(self.fields, Mapping) else {}
        payload["id"] = self.id
        payload["pageContent"] = self.page_content
        payload["metadata"] = dict(self.metadata) if isinstance(self.metadata, Mapping) else {}
        return payload
