"""Load the documentation corpus and run a smoke query against it.

Usage: python -m wazuh_assistant.ingest [--docs-dir DIR] [--query Q]
"""

from __future__ import annotations

import argparse
import logging

from wazuh_assistant.config import load_settings
from wazuh_assistant.ingest.parser import ParserRegistry
from wazuh_assistant.ingest.pipeline import IngestPipeline
from wazuh_assistant.retrieval.knowledge import seed_default_documents
from wazuh_assistant.retrieval.vector_store import InMemoryDocumentStore

logger = logging.getLogger("wazuh_assistant.ingest")

DEFAULT_QUERY = "alert severity levels"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wazuh-assistant-ingest",
        description="Load Wazuh documentation into the in-memory store and test retrieval.",
    )
    parser.add_argument("--docs-dir", default=None, help="directory of .md/.txt files to add")
    parser.add_argument("--query", default=DEFAULT_QUERY, help="smoke query to run after loading")
    parser.add_argument("--limit", type=int, default=2, help="number of results to show")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    store = InMemoryDocumentStore()
    builtin = seed_default_documents(store)
    logger.info("[ingest:main] loaded %d built-in documents", builtin)

    docs_dir = args.docs_dir or settings.retrieval.docs_dir
    if docs_dir:
        loaded = IngestPipeline(ParserRegistry(), store).ingest_directory(docs_dir)
        logger.info("[ingest:main] loaded %d local documents from %s", len(loaded), docs_dir)

    logger.info("[ingest:main] total documents in store: %d", len(store))

    results = store.search(args.query, args.limit)
    for doc, score in zip(results.documents, results.scores, strict=True):
        print(f"{score:.4f}  {doc.id}  {doc.content[:100]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
