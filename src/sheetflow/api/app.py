"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from sheetflow.api.routes import files, health
from sheetflow.core.config import AppSettings
from sheetflow.core.exceptions import TransportError
from sheetflow.core.logging import configure_logging
from sheetflow.core.protocols import IJobQueue
from sheetflow.queue import create_job_queue
from sheetflow.services.intake import UploadIntake
from sheetflow.services.producer import QueueProducer

logger = logging.getLogger(__name__)


def create_app(settings: AppSettings | None = None, queue: IJobQueue | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``settings`` and ``queue`` default to environment configuration and the
    configured queue backend.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_settings = settings if settings is not None else AppSettings()
        configure_logging(app_settings.log_level)

        job_queue = queue if queue is not None else create_job_queue(app_settings)
        try:
            job_queue.ensure_exists()
        except TransportError as exc:
            # /ready reports the queue as unavailable until it comes back
            logger.warning("Queue %s not reachable at startup: %s", app_settings.queue.name, exc)

        app.state.settings = app_settings
        app.state.queue = job_queue
        app.state.intake = UploadIntake(
            upload_dir=app_settings.upload.upload_dir,
            allowed_extensions=app_settings.upload.allowed_extensions,
            max_file_size=app_settings.upload.max_file_size,
        )
        app.state.producer = QueueProducer(job_queue)
        yield

    app = FastAPI(
        title="SheetFlow File Ingestion",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(files.router, prefix="/files")
    return app
