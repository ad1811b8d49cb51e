"""Parsers that turn local documentation files into retrievable documents."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

from wazuh_assistant.types import Document

_NEWLINES = re.compile(r"\n+")


class Parser(ABC):
    """Base parser interface used by the ingest pipeline."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, path: Path) -> Document:
        """Parse a file into a single document."""


class TextParser(Parser):
    """Parser for plain text and markdown documentation.

    Line breaks are collapsed into single spaces so the whole file becomes one
    flat passage for whitespace tokenization.
    """

    extensions = (".txt", ".md")

    def parse(self, path: Path) -> Document:
        text = path.read_text(encoding="utf-8")
        return Document(
            id=f"file-{path.stem}",
            content=_NEWLINES.sub(" ", text).strip(),
            metadata={
                "source": "Local Documentation",
                "type": "documentation",
                "filename": path.name,
                "category": "reference",
            },
        )


class ParserRegistry:
    """Maps file extension to parser implementation."""

    def __init__(self, parsers: list[Parser] | None = None) -> None:
        self._parsers: dict[str, Parser] = {}
        for parser in parsers or [TextParser()]:
            self.register(parser)

    def register(self, parser: Parser) -> None:
        for extension in parser.extensions:
            self._parsers[extension.lower()] = parser

    def supports(self, path: str | Path) -> bool:
        return Path(path).suffix.lower() in self._parsers

    def parse_path(self, path: str | Path) -> Document:
        file_path = Path(path)
        parser = self._parsers.get(file_path.suffix.lower())
        if parser is None:
            raise ValueError(f"No parser registered for extension: {file_path.suffix}")
        return parser.parse(file_path)
