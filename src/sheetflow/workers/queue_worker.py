"""
SheetFlow QueueWorker - polling consumer for the file-processing queue.

Lifecycle per poll: Receive batch -> Decode -> Dispatch -> Delete on success.

A message is deleted only after its file was fully processed. Any failure
leaves it on the queue, so it reappears once its visibility window expires
and is retried (at-least-once). Nothing raised while handling a message stops
the loop; shutdown happens only through the stop token, which is checked at
every iteration boundary.

Usage:
    sheetflow-worker            # console script
    python -m sheetflow.workers.queue_worker
"""

from __future__ import annotations

import logging
import signal
import sys
import threading
from enum import StrEnum
from typing import Any

from sheetflow.core.config import AppSettings
from sheetflow.core.exceptions import DecodeError, SheetFlowError, TransportError
from sheetflow.core.logging import configure_logging
from sheetflow.core.protocols import IJobQueue
from sheetflow.ingestion.dispatcher import IngestionDispatcher
from sheetflow.models.job import QueueMessage
from sheetflow.queue import create_job_queue
from sheetflow.queue.codec import decode_job

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1
DEFAULT_VISIBILITY_TIMEOUT = 30  # seconds
DEFAULT_POLL_INTERVAL = 5.0  # seconds


class WorkerState(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"


class QueueWorker:
    """Polls an IJobQueue and hands each job to the ingestion dispatcher.

    Messages in a batch are handled one at a time in receipt order.
    """

    def __init__(
        self,
        queue: IJobQueue,
        dispatcher: IngestionDispatcher,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        visibility_timeout: int = DEFAULT_VISIBILITY_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._queue = queue
        self._dispatcher = dispatcher
        self.batch_size = batch_size
        self.visibility_timeout = visibility_timeout
        self.poll_interval = poll_interval
        self._stop_event = stop_event or threading.Event()
        self._state = WorkerState.IDLE

        self._jobs_processed = 0
        self._jobs_failed = 0
        self._jobs_invalid = 0
        self._jobs_skipped = 0

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request a graceful stop at the next iteration boundary."""
        self._stop_event.set()

    # -------------------------------------------------------------------------
    # Message handling
    # -------------------------------------------------------------------------

    def handle_message(self, message: QueueMessage) -> bool:
        """Process one message. Returns True when the job completed.

        Never raises: every failure is logged and the message left undeleted.
        """
        try:
            job = decode_job(message.body)
        except DecodeError as exc:
            self._jobs_invalid += 1
            logger.warning(
                "job-failed message_id=%s stage=decode attempt=%d error=%s",
                message.message_id, message.dequeue_count, exc,
            )
            return False

        logger.info(
            "job-received message_id=%s original_name=%s path=%s attempt=%d",
            message.message_id, job.original_name, job.path, message.dequeue_count,
        )

        try:
            results = self._dispatcher.process(job.path, job.original_name)
        except SheetFlowError as exc:
            self._jobs_failed += 1
            logger.error(
                "job-failed message_id=%s original_name=%s stage=ingest error=%s",
                message.message_id, job.original_name, exc,
            )
            return False
        except Exception:
            self._jobs_failed += 1
            logger.exception(
                "job-failed message_id=%s original_name=%s stage=ingest",
                message.message_id, job.original_name,
            )
            return False

        if results:
            self._jobs_processed += 1
        else:
            self._jobs_skipped += 1

        try:
            self._queue.delete(message.message_id, message.receipt)
        except TransportError as exc:
            # Work is done; a redelivery will just repeat it.
            logger.error(
                "Delete failed after processing message_id=%s original_name=%s error=%s",
                message.message_id, job.original_name, exc,
            )
            return True

        logger.info(
            "job-processed message_id=%s original_name=%s units=%d rows=%d",
            message.message_id, job.original_name, len(results),
            sum(r.row_count for r in results),
        )
        return True

    # -------------------------------------------------------------------------
    # Poll loop
    # -------------------------------------------------------------------------

    def run_once(self) -> int:
        """Poll once and handle the received batch. Returns messages handled."""
        try:
            messages = self._queue.receive_batch(self.batch_size, self.visibility_timeout)
        except TransportError as exc:
            logger.error("Receive failed, will retry next poll: %s", exc)
            return 0

        if not messages:
            return 0

        self._state = WorkerState.PROCESSING
        try:
            logger.debug("Received %d messages", len(messages))
            for message in messages:
                self.handle_message(message)
        finally:
            self._state = WorkerState.IDLE
        return len(messages)

    def run(self, max_iterations: int | None = None) -> None:
        """Poll until stopped, sleeping ``poll_interval`` after every poll.

        ``max_iterations`` bounds the number of polls.
        """
        logger.info(
            "Starting worker loop batch_size=%d visibility_timeout=%ds poll_interval=%.2fs",
            self.batch_size, self.visibility_timeout, self.poll_interval,
        )
        iterations = 0
        while not self._stop_event.is_set():
            if max_iterations is not None and iterations >= max_iterations:
                break
            self.run_once()
            iterations += 1
            self._stop_event.wait(self.poll_interval)

        logger.info(
            "Worker stopped processed=%d failed=%d invalid=%d skipped=%d",
            self._jobs_processed, self._jobs_failed, self._jobs_invalid, self._jobs_skipped,
        )

    def get_stats(self) -> dict[str, Any]:
        return {
            "state": str(self._state),
            "processed": self._jobs_processed,
            "failed": self._jobs_failed,
            "invalid": self._jobs_invalid,
            "skipped": self._jobs_skipped,
            "stop_requested": self.stop_requested,
        }


def build_worker(settings: AppSettings, queue: IJobQueue | None = None) -> QueueWorker:
    """Wire a QueueWorker from settings."""
    return QueueWorker(
        queue if queue is not None else create_job_queue(settings),
        IngestionDispatcher(),
        batch_size=settings.queue.batch_size,
        visibility_timeout=settings.queue.visibility_timeout,
        poll_interval=settings.queue.poll_interval,
    )


def main() -> int:
    settings = AppSettings()
    configure_logging(settings.log_level)

    queue = create_job_queue(settings)
    try:
        queue.ensure_exists()
    except TransportError as exc:
        logger.critical("Queue %s unavailable at startup: %s", settings.queue.name, exc)
        return 1

    worker = build_worker(settings, queue)

    def _handle_signal(signum: int, frame: Any) -> None:
        logger.info("Received %s, stopping worker", signal.Signals(signum).name)
        worker.stop()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    worker.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
