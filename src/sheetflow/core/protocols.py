"""Protocol interfaces for SheetFlow abstractions.

The worker, producer and dispatcher depend only on these Protocols, so tests
can substitute in-memory fakes without inheritance.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sheetflow.models.job import ParseResult, QueueMessage


# ---------------------------------------------------------------------------
# Job Queue
# ---------------------------------------------------------------------------

@runtime_checkable
class IJobQueue(Protocol):
    """Durable at-least-once message queue (SQS or in-memory)."""

    def ensure_exists(self) -> None: ...

    def enqueue(self, body: bytes) -> str: ...

    def receive_batch(self, max_messages: int, visibility_timeout: int) -> list[QueueMessage]: ...

    def delete(self, message_id: str, receipt: str) -> None: ...


# ---------------------------------------------------------------------------
# Format Parser
# ---------------------------------------------------------------------------

@runtime_checkable
class IFormatParser(Protocol):
    """Produces row counts from a stored file path."""

    def parse(self, path: str) -> list[ParseResult]: ...
