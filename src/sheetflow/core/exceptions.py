"""SheetFlow exception hierarchy."""

from __future__ import annotations


class SheetFlowError(Exception):
    """Base exception for all SheetFlow errors."""


class TransportError(SheetFlowError):
    """Queue connectivity, auth, throttling or stale-receipt failure."""


class DecodeError(SheetFlowError):
    """Queue message body could not be decoded into a job descriptor."""


class ParseError(SheetFlowError):
    """Uploaded file is unreadable or malformed."""


class UnsupportedFormatError(SheetFlowError):
    """No parser is registered for the file extension."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"Unsupported file extension: {extension or '<none>'}")


class UploadRejectedError(SheetFlowError):
    """Upload failed intake validation (extension or size)."""

    def __init__(self, original_name: str, reason: str) -> None:
        self.original_name = original_name
        self.reason = reason
        super().__init__(f"Upload {original_name!r} rejected: {reason}")
