"""Format parsers: delimited text (streamed) and spreadsheet workbooks (loaded whole)."""

from __future__ import annotations

import csv
import logging
from typing import Any, Iterator

from openpyxl import load_workbook

from sheetflow.core.exceptions import ParseError
from sheetflow.models.job import ParseResult

logger = logging.getLogger(__name__)


class DelimitedTextParser:
    """IFormatParser for CSV-style files. First row is the header."""

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8-sig") -> None:
        self._delimiter = delimiter
        self._encoding = encoding

    def iter_rows(self, path: str) -> Iterator[dict[str, Any]]:
        """Lazily yield one dict per data row."""
        try:
            with open(path, newline="", encoding=self._encoding) as handle:
                reader = csv.DictReader(handle, delimiter=self._delimiter)
                for row in reader:
                    yield row
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise ParseError(f"Failed to read delimited file {path!r}: {exc}") from exc

    def parse(self, path: str) -> list[ParseResult]:
        row_count = sum(1 for _ in self.iter_rows(path))
        return [ParseResult(row_count=row_count)]


def _header_names(header: tuple[Any, ...]) -> list[str]:
    return [
        str(value) if value is not None else f"column_{idx + 1}"
        for idx, value in enumerate(header)
    ]


class WorkbookParser:
    """IFormatParser for OOXML workbooks (.xlsx/.xlsm).

    The whole workbook is loaded into memory. Any failure to load or read it
    fails the file as a whole; there is no per-sheet recovery.
    """

    def read_sheets(self, path: str) -> dict[str, list[dict[str, Any]]]:
        """Return ``{sheet_name: rows}``, empty cells as ``None``, blank rows dropped."""
        try:
            workbook = load_workbook(path, data_only=True)
        except Exception as exc:
            # corrupt archive parts surface as many unrelated exception types
            raise ParseError(f"Failed to load workbook {path!r}: {exc}") from exc

        sheets: dict[str, list[dict[str, Any]]] = {}
        try:
            for worksheet in workbook.worksheets:
                values = worksheet.iter_rows(values_only=True)
                header = next(values, None)
                if header is None:
                    sheets[worksheet.title] = []
                    continue
                columns = _header_names(header)
                sheets[worksheet.title] = [
                    dict(zip(columns, row))
                    for row in values
                    if any(cell is not None for cell in row)
                ]
        except Exception as exc:
            raise ParseError(f"Failed to read workbook {path!r}: {exc}") from exc
        finally:
            workbook.close()
        return sheets

    def parse(self, path: str) -> list[ParseResult]:
        return [
            ParseResult(row_count=len(rows), sheet_name=name)
            for name, rows in self.read_sheets(path).items()
        ]
