"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Document:
    """A free-text documentation entry held by the retrieval store."""

    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SearchResult:
    """Ranked documents paired positionally with their similarity scores."""

    documents: list[Document]
    scores: list[float]

    def __len__(self) -> int:
        return len(self.documents)


@dataclass(slots=True)
class QueryResult:
    """Output of a pre-built security query."""

    data: Any
    summary: str
    insights: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
