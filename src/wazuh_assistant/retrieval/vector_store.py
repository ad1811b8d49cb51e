"""Document store interface and the in-memory lexical implementation."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from math import sqrt
from typing import Protocol

from wazuh_assistant.types import Document, SearchResult

logger = logging.getLogger(__name__)

TermVector = dict[str, int]


class DocumentStore(Protocol):
    """Minimal document store contract for retrieval."""

    def add_document(self, doc: Document) -> None:
        """Store one document."""

    def add_documents(self, docs: list[Document]) -> None:
        """Store many documents in order."""

    def search(self, query: str, limit: int = 5) -> SearchResult:
        """Return the documents most similar to `query`."""

    def get_context(self, query: str, limit: int = 3) -> str:
        """Return matching documents formatted as a prompt context block."""


@dataclass(slots=True)
class _StoredDocument:
    doc: Document
    vector: TermVector


class InMemoryDocumentStore:
    """Bag-of-words cosine similarity over an in-process document list.

    Term vectors map each distinct lowercase token to its count and are
    compared by token identity, so a query term only contributes to the dot
    product when the same term occurs in the document.

    Documents are appended and never replaced: adding two documents with the
    same id keeps both entries.
    """

    def __init__(self) -> None:
        self._entries: list[_StoredDocument] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def documents(self) -> list[Document]:
        return [entry.doc for entry in self._entries]

    def add_document(self, doc: Document) -> None:
        self._entries.append(_StoredDocument(doc=doc, vector=vectorize(doc.content)))

    def add_documents(self, docs: list[Document]) -> None:
        for doc in docs:
            self.add_document(doc)
        logger.info("[retrieval:add_documents] added=%d total=%d", len(docs), len(self))

    def search(self, query: str, limit: int = 5) -> SearchResult:
        if limit <= 0 or not self._entries:
            return SearchResult(documents=[], scores=[])

        query_vector = vectorize(query)
        scored = [
            (entry.doc, cosine_similarity(query_vector, entry.vector))
            for entry in self._entries
        ]
        # sorted() is stable, so equal scores keep insertion order.
        ranked = sorted(scored, key=lambda item: item[1], reverse=True)[:limit]

        logger.debug(
            "[retrieval:search] query=%r limit=%d top=%s",
            query,
            limit,
            [(doc.id, round(score, 4)) for doc, score in ranked],
        )
        return SearchResult(
            documents=[doc for doc, _ in ranked],
            scores=[score for _, score in ranked],
        )

    def get_context(self, query: str, limit: int = 3) -> str:
        results = self.search(query, limit)
        if not results.documents:
            return ""

        return "\n\n".join(
            f"Document: {doc.content}\nSource: {doc.metadata.get('source') or 'Unknown'}"
            for doc in results.documents
        )


def tokenize(text: str) -> list[str]:
    return text.lower().split()


def vectorize(text: str) -> TermVector:
    return dict(Counter(tokenize(text)))


def cosine_similarity(a: TermVector, b: TermVector) -> float:
    if not a or not b:
        return 0.0
    numerator = sum(count * b.get(term, 0) for term, count in a.items())
    norm_a = sqrt(sum(count * count for count in a.values()))
    norm_b = sqrt(sum(count * count for count in b.values()))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    # Clamp float rounding so identical vectors never exceed 1.0.
    return min(1.0, numerator / (norm_a * norm_b))
