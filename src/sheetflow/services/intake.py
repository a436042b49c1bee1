"""UploadIntake: validates uploads and persists them to the upload directory."""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path
from typing import BinaryIO

from sheetflow.core.exceptions import UploadRejectedError
from sheetflow.models.job import FileHandle

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadIntake:
    """Stores raw uploads under unique names and returns stable file handles."""

    def __init__(self, upload_dir: str, allowed_extensions: list[str],
                 max_file_size: int) -> None:
        self._upload_dir = Path(upload_dir)
        self._allowed = {ext.lower() for ext in allowed_extensions}
        self._max_file_size = max_file_size

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def _unique_name(self, extension: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"

    def store(self, original_name: str, stream: BinaryIO) -> FileHandle:
        extension = Path(original_name).suffix.lower()
        if extension not in self._allowed:
            raise UploadRejectedError(
                original_name, f"extension must be one of {', '.join(sorted(self._allowed))}"
            )

        self._upload_dir.mkdir(parents=True, exist_ok=True)
        target = self._upload_dir / self._unique_name(extension)
        written = 0
        with target.open("xb") as out:
            while chunk := stream.read(CHUNK_SIZE):
                written += len(chunk)
                if written > self._max_file_size:
                    break
                out.write(chunk)

        if written > self._max_file_size:
            target.unlink(missing_ok=True)
            raise UploadRejectedError(original_name, f"exceeds {self._max_file_size} bytes")

        logger.info("Stored upload original_name=%s path=%s bytes=%d", original_name, target, written)
        return FileHandle(original_name=original_name, stored_path=str(target))
