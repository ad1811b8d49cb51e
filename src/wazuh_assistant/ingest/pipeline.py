"""Documentation ingest: parse local files and add them to the document store."""

from __future__ import annotations

import logging
from pathlib import Path

from wazuh_assistant.ingest.parser import ParserRegistry
from wazuh_assistant.retrieval.vector_store import DocumentStore
from wazuh_assistant.types import Document

logger = logging.getLogger(__name__)


class IngestPipeline:
    """Coordinates parser and document store stages."""

    def __init__(self, parser_registry: ParserRegistry, store: DocumentStore) -> None:
        self._parser_registry = parser_registry
        self._store = store

    def load_directory(self, directory: str | Path) -> list[Document]:
        """Parse every supported file directly under `directory`.

        Files are visited in name order. A file that cannot be read is logged
        and skipped; a missing directory yields no documents.
        """

        root = Path(directory)
        if not root.is_dir():
            logger.info("[ingest:load_directory] no docs directory at %s", root)
            return []

        docs: list[Document] = []
        for path in sorted(root.iterdir()):
            if not path.is_file() or not self._parser_registry.supports(path):
                continue
            try:
                docs.append(self._parser_registry.parse_path(path))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("[ingest:load_directory] failed to load %s: %s", path.name, exc)
        return docs

    def ingest_directory(self, directory: str | Path) -> list[Document]:
        """Load a directory and add the resulting documents to the store."""

        docs = self.load_directory(directory)
        self._store.add_documents(docs)
        logger.info("[ingest:ingest_directory] dir=%s documents=%d", directory, len(docs))
        return docs
