"""Ingestion dispatcher: routes a stored file to the parser registered for its extension."""

from __future__ import annotations

import logging
from pathlib import Path

from sheetflow.core.exceptions import UnsupportedFormatError
from sheetflow.core.protocols import IFormatParser
from sheetflow.ingestion.parsers import DelimitedTextParser, WorkbookParser
from sheetflow.models.job import ParseResult

logger = logging.getLogger(__name__)


def _normalize(extension: str) -> str:
    extension = extension.lower()
    return extension if extension.startswith(".") else f".{extension}"


class ParserRegistry:
    """Extension -> parser mapping. Extensions are matched case-insensitively."""

    def __init__(self) -> None:
        self._parsers: dict[str, IFormatParser] = {}

    def register(self, extension: str, parser: IFormatParser) -> None:
        self._parsers[_normalize(extension)] = parser

    def get(self, extension: str) -> IFormatParser:
        parser = self._parsers.get(extension.lower())
        if parser is None:
            raise UnsupportedFormatError(extension)
        return parser

    def extensions(self) -> list[str]:
        return sorted(self._parsers)


def default_registry() -> ParserRegistry:
    """Registry with the built-in CSV and workbook parsers."""
    registry = ParserRegistry()
    registry.register(".csv", DelimitedTextParser())
    workbook = WorkbookParser()
    registry.register(".xlsx", workbook)
    registry.register(".xlsm", workbook)
    return registry


class IngestionDispatcher:
    """Selects a parser by file extension and returns its parse results."""

    def __init__(self, registry: ParserRegistry | None = None) -> None:
        self._registry = registry if registry is not None else default_registry()

    @property
    def registry(self) -> ParserRegistry:
        return self._registry

    def process(self, stored_path: str, original_name: str) -> list[ParseResult]:
        """Parse ``stored_path`` with the parser for ``original_name``'s extension.

        An unregistered extension is a soft skip: a warning is logged and an
        empty list returned. Parse failures propagate as ParseError.
        """
        extension = Path(original_name).suffix.lower()
        try:
            parser = self._registry.get(extension)
        except UnsupportedFormatError as exc:
            logger.warning("job-skipped original_name=%s reason=%s", original_name, exc)
            return []

        results = parser.parse(stored_path)
        for result in results:
            if result.sheet_name is None:
                logger.info("Parsed file original_name=%s rows=%d", original_name, result.row_count)
            else:
                logger.info(
                    "Parsed sheet original_name=%s sheet=%s rows=%d",
                    original_name, result.sheet_name, result.row_count,
                )
        return results
