"""In-memory job queue for unit tests and single-process development."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable

from sheetflow.core.exceptions import TransportError
from sheetflow.models.job import QueueMessage
from sheetflow.queue.codec import to_wire


@dataclass
class _StoredMessage:
    message_id: str
    body: str
    visible_at: float = 0.0
    receipt: str | None = None
    dequeue_count: int = 0


class MemoryJobQueue:
    """Dict-backed IJobQueue that models visibility windows and redelivery.

    Every receive issues a fresh receipt, so a receipt from an earlier delivery
    is stale once the message has been redelivered or deleted.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._messages: dict[str, _StoredMessage] = {}
        self._exists = False

    @property
    def exists(self) -> bool:
        return self._exists

    def ensure_exists(self) -> None:
        self._exists = True

    def enqueue(self, body: bytes) -> str:
        return self.put_raw(to_wire(body))

    def put_raw(self, text: str) -> str:
        """Append a message whose wire text is used verbatim."""
        message_id = str(uuid.uuid4())
        with self._lock:
            self._messages[message_id] = _StoredMessage(message_id=message_id, body=text)
        return message_id

    def receive_batch(self, max_messages: int, visibility_timeout: int) -> list[QueueMessage]:
        now = self._clock()
        received: list[QueueMessage] = []
        with self._lock:
            for stored in self._messages.values():
                if len(received) >= max_messages:
                    break
                if stored.visible_at > now:
                    continue
                stored.receipt = uuid.uuid4().hex
                stored.visible_at = now + visibility_timeout
                stored.dequeue_count += 1
                received.append(QueueMessage(
                    message_id=stored.message_id,
                    receipt=stored.receipt,
                    body=stored.body,
                    dequeue_count=stored.dequeue_count,
                ))
        return received

    def delete(self, message_id: str, receipt: str) -> None:
        with self._lock:
            stored = self._messages.get(message_id)
            if stored is None or stored.receipt != receipt:
                raise TransportError(
                    f"Stale or unknown receipt for message_id={message_id!r}"
                )
            del self._messages[message_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
