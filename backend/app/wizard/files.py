"""Pending uploads and the per-bucket upload rules.

Size and MIME checks run at upload time, not during step validation:
a draft may hold any number of pending files until it is submitted.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field

from app.config import settings

PHOTO_TYPES = frozenset({"image/jpeg", "image/png"})
DOCUMENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png"})


class UploadRejectedError(Exception):
    """A file failed the local size/type check; nothing was sent."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"{filename}: {reason}")


@dataclass(frozen=True)
class PendingFile:
    """A binary file held in the draft until the upload phase."""
    name: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadRule:
    allowed_types: frozenset[str]
    max_bytes: int

    def check(self, name: str, content_type: str, size: int) -> None:
        if size > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise UploadRejectedError(name, f"Files must be less than {limit_mb}MB")
        if content_type not in self.allowed_types:
            allowed = ", ".join(sorted(self.allowed_types))
            raise UploadRejectedError(name, f"File type {content_type} not allowed (allowed: {allowed})")

    def check_file(self, file: PendingFile) -> None:
        self.check(file.name, file.content_type, file.size)


PHOTO_RULE = UploadRule(PHOTO_TYPES, settings.max_upload_bytes)
DOCUMENT_RULE = UploadRule(DOCUMENT_TYPES, settings.max_upload_bytes)


def storage_path(prefix: str, filename: str) -> str:
    """`{prefix}/{timestamp}-{random}-{filename}`, unique per call."""
    timestamp = int(time.time() * 1000)
    safe_name = filename.replace("/", "_")
    return f"{prefix}/{timestamp}-{uuid.uuid4().hex[:8]}-{safe_name}"
