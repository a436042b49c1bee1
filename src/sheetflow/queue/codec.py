"""Queue wire encoding: base64 over UTF-8 JSON job descriptors."""

from __future__ import annotations

import base64
import binascii

from pydantic import ValidationError

from sheetflow.core.exceptions import DecodeError
from sheetflow.models.job import JobDescriptor


def to_wire(body: bytes) -> str:
    """Base64-encode a message body for transit."""
    return base64.b64encode(body).decode("ascii")


def from_wire(text: str) -> bytes:
    """Reverse :func:`to_wire`. Raises DecodeError on invalid base64."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Message body is not valid base64: {exc}") from exc


def encode_job(job: JobDescriptor) -> bytes:
    """Serialize a job descriptor to UTF-8 JSON using wire field names."""
    return job.model_dump_json(by_alias=True).encode("utf-8")


def decode_job(text: str) -> JobDescriptor:
    """Decode wire text (base64, then UTF-8 JSON) into a JobDescriptor."""
    raw = from_wire(text)
    try:
        return JobDescriptor.model_validate_json(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Message body is not valid UTF-8: {exc}") from exc
    except ValidationError as exc:
        raise DecodeError(f"Message body is not a valid job descriptor: {exc}") from exc
