"""Upload ingestion data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IngestStatus(str, Enum):
    """Terminal state of one ingestion attempt."""

    COMMITTED = "committed"  # Object written to the store
    REJECTED_POLICY = "rejected_policy"  # Size limit exceeded
    REJECTED_FORMAT = "rejected_format"  # Bad boundary, body or file type
    STORAGE_FAILURE = "storage_failure"  # Sink failed or upload aborted
    NO_CONTENT = "no_content"  # No file-bearing section in the body


@dataclass(frozen=True)
class IngestOutcome:
    """Result of one ingestion attempt."""

    status: IngestStatus
    reason: str = ""
    object_name: Optional[str] = None
    size_bytes: int = 0

    @classmethod
    def committed(cls, object_name: str, size_bytes: int) -> "IngestOutcome":
        return cls(IngestStatus.COMMITTED, object_name=object_name, size_bytes=size_bytes)

    @classmethod
    def rejected_policy(cls, reason: str) -> "IngestOutcome":
        return cls(IngestStatus.REJECTED_POLICY, reason=reason)

    @classmethod
    def rejected_format(cls, reason: str) -> "IngestOutcome":
        return cls(IngestStatus.REJECTED_FORMAT, reason=reason)

    @classmethod
    def storage_failure(cls, reason: str) -> "IngestOutcome":
        return cls(IngestStatus.STORAGE_FAILURE, reason=reason)

    @classmethod
    def no_content(cls) -> "IngestOutcome":
        return cls(IngestStatus.NO_CONTENT, reason="no file section")


@dataclass(frozen=True)
class UploadPolicy:
    """Per-request upload constraints."""

    max_upload_bytes: int
    allowed_extensions: frozenset[str]
    container_name: str

    def accepts(self, file_name: str) -> bool:
        """Check the file name suffix case-insensitively."""
        name = file_name.lower()
        return any(name.endswith(ext) for ext in self.allowed_extensions)

    @property
    def max_upload_mb(self) -> int:
        return self.max_upload_bytes // (1024 * 1024)
