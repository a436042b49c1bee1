"""Job pipeline models: file handles, job descriptors, queue envelopes, parse results."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(StrEnum):
    ENQUEUED = "enqueued"
    REJECTED = "rejected"
    FAILED = "failed"


class FileHandle(BaseModel):
    """A raw upload persisted by intake, ready to be enqueued."""

    model_config = ConfigDict(frozen=True)

    original_name: str
    stored_path: str


class JobDescriptor(BaseModel):
    """Minimal metadata to locate and identify an uploaded file.

    Field aliases are the queue wire names; both forms are accepted on input.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    original_name: str = Field(alias="originalname")
    filename: str
    path: str
    uploaded_at: datetime = Field(alias="uploadedAt")


class EnqueueAck(BaseModel):
    """Acknowledgment returned to intake once a job is accepted by the queue."""

    original_name: str
    filename: str
    path: str
    status: JobStatus = JobStatus.ENQUEUED


class UploadResult(BaseModel):
    """Per-file outcome reported in the upload response."""

    original_name: str
    status: JobStatus
    filename: Optional[str] = None
    path: Optional[str] = None
    error: Optional[str] = None


class QueueMessage(BaseModel):
    """Transport envelope for a received message.

    ``body`` is the raw wire text. ``receipt`` identifies this delivery only and
    changes every time the message is redelivered.
    """

    model_config = ConfigDict(frozen=True)

    message_id: str
    receipt: str
    body: str
    dequeue_count: int = 1


class ParseResult(BaseModel):
    """Row count for one logical unit: a CSV file or a workbook sheet."""

    model_config = ConfigDict(frozen=True)

    row_count: int
    sheet_name: Optional[str] = None
