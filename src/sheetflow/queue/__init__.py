"""Pluggable job queue backends behind the IJobQueue Protocol."""

from __future__ import annotations

from sheetflow.core.config import AppSettings
from sheetflow.core.protocols import IJobQueue
from sheetflow.queue.memory_backend import MemoryJobQueue
from sheetflow.queue.sqs_backend import SQSJobQueue


def create_job_queue(settings: AppSettings | None = None) -> IJobQueue:
    """Create the job queue selected by ``settings.queue.backend``."""
    if settings is None:
        settings = AppSettings()

    if settings.queue.backend == "memory":
        return MemoryJobQueue()

    return SQSJobQueue(
        queue_name=settings.queue.name,
        region=settings.queue.region,
        endpoint_url=settings.queue.endpoint_url,
        wait_time_seconds=settings.queue.wait_time_seconds,
    )


__all__ = ["IJobQueue", "MemoryJobQueue", "SQSJobQueue", "create_job_queue"]
