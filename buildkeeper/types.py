"""This file has types/dataclass definitions that are used for
exchanging data between the walker, the storage backend and the
upload pipeline.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict


class StorageTier(str, Enum):
    """Cost/latency class of uploaded objects.

    Everything but `standard` is cheaper to keep and slower or more
    expensive to read back.
    """

    STANDARD = "standard"
    INFREQUENT_ACCESS = "infrequent-access"
    ARCHIVE = "archive"
    DEEP_ARCHIVE = "deep-archive"

    @property
    def storage_class(self) -> str:
        """Name of the tier as understood by `aws s3 cp --storage-class`"""
        return _STORAGE_CLASSES[self]


_STORAGE_CLASSES = {
    StorageTier.STANDARD: "STANDARD",
    StorageTier.INFREQUENT_ACCESS: "STANDARD_IA",
    StorageTier.ARCHIVE: "GLACIER",
    StorageTier.DEEP_ARCHIVE: "DEEP_ARCHIVE",
}


class LogArtifact(BaseModel):
    """Log file of one build of one job."""

    job_name: str
    build_number: int
    path: Path

    model_config = ConfigDict(frozen=True)

    @property
    def id(self) -> str:
        return f"{self.job_name}-{self.build_number}"

    def remote_key(self, *, compressed: bool) -> str:
        key = f"{self.id}.log"
        if compressed:
            key += ".gz"
        return key


class TransferResult(BaseModel):
    success: bool
    destination: str
    reason: str | None = None
    """Why the transfer failed. Always None for successful transfers."""


UploadStatus = Literal["uploaded", "failed", "skipped_existing"]


class UploadOutcome(BaseModel):
    """Outcome of processing one eligible log artifact"""

    artifact: LogArtifact
    key: str
    destination: str
    status: UploadStatus
    reason: str | None = None
    """Why the upload failed, or why an uploaded log is still on disk."""

    @property
    def ok(self) -> bool:
        return self.status != "failed"
