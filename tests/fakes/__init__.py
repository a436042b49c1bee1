"""Shared test doubles: in-memory queue, controllable clock, scripted parsers."""

from __future__ import annotations

from sheetflow.core.exceptions import ParseError
from sheetflow.models.job import ParseResult
from sheetflow.queue.memory_backend import MemoryJobQueue


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingParser:
    """IFormatParser that records calls and returns a fixed row count."""

    def __init__(self, row_count: int = 1, fail: bool = False) -> None:
        self.row_count = row_count
        self.fail = fail
        self.calls: list[str] = []

    def parse(self, path: str) -> list[ParseResult]:
        self.calls.append(path)
        if self.fail:
            raise ParseError(f"scripted failure for {path}")
        return [ParseResult(row_count=self.row_count)]


__all__ = ["FakeClock", "MemoryJobQueue", "RecordingParser"]
