"""QueueProducer: turns stored uploads into queued job descriptors."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from sheetflow.core.exceptions import TransportError
from sheetflow.core.protocols import IJobQueue
from sheetflow.models.job import EnqueueAck, FileHandle, JobDescriptor
from sheetflow.queue.codec import encode_job

logger = logging.getLogger(__name__)


class QueueProducer:
    """Serializes one job per file handle and enqueues it.

    Each call is independent; concurrent callers share only the queue client.
    """

    def __init__(self, queue: IJobQueue) -> None:
        self._queue = queue

    def enqueue_job(self, handle: FileHandle) -> EnqueueAck:
        job = JobDescriptor(
            original_name=handle.original_name,
            filename=Path(handle.stored_path).name,
            path=handle.stored_path,
            uploaded_at=datetime.now(timezone.utc),
        )
        try:
            message_id = self._queue.enqueue(encode_job(job))
        except TransportError:
            logger.error("Failed to enqueue original_name=%s path=%s", job.original_name, job.path)
            raise

        logger.info(
            "job-enqueued message_id=%s original_name=%s path=%s",
            message_id, job.original_name, job.path,
        )
        return EnqueueAck(original_name=job.original_name, filename=job.filename, path=job.path)
