"""File upload endpoint: store each file, then enqueue it for processing."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from sheetflow.core.exceptions import TransportError, UploadRejectedError
from sheetflow.models.job import JobStatus, UploadResult
from sheetflow.services.intake import UploadIntake
from sheetflow.services.producer import QueueProducer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


async def _intake_one(intake: UploadIntake, producer: QueueProducer,
                      upload: UploadFile) -> UploadResult:
    original_name = upload.filename or ""
    try:
        handle = await run_in_threadpool(intake.store, original_name, upload.file)
    except UploadRejectedError as exc:
        return UploadResult(original_name=original_name, status=JobStatus.REJECTED, error=exc.reason)

    try:
        ack = await run_in_threadpool(producer.enqueue_job, handle)
    except TransportError as exc:
        return UploadResult(
            original_name=original_name,
            status=JobStatus.FAILED,
            path=handle.stored_path,
            error=str(exc),
        )
    return UploadResult(
        original_name=ack.original_name,
        status=ack.status,
        filename=ack.filename,
        path=ack.path,
    )


@router.post("/upload")
async def upload_files(request: Request,
                       files: Optional[list[UploadFile]] = File(default=None)) -> dict:
    """Accept up to ``max_files`` uploads; report a status per file."""
    if not files:
        return {"message": "No files uploaded"}

    settings = request.app.state.settings
    if len(files) > settings.upload.max_files:
        raise HTTPException(
            status_code=400,
            detail=f"At most {settings.upload.max_files} files per upload",
        )

    results = await asyncio.gather(*(
        _intake_one(request.app.state.intake, request.app.state.producer, upload)
        for upload in files
    ))
    logger.info(
        "Upload handled files=%d enqueued=%d",
        len(results), sum(1 for r in results if r.status == JobStatus.ENQUEUED),
    )
    return {
        "message": "Files uploaded and enqueued",
        "results": [r.model_dump(mode="json", exclude_none=True) for r in results],
    }
