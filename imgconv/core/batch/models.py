"""Data models for batch processing."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from imgconv.core.formats import SupportedFormat


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BatchStatus(str, Enum):
    """Status of a batch run."""

    INITIALIZING = "initializing"
    SCANNING = "scanning"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BatchItemStatus(str, Enum):
    """Status of an individual file in a batch run."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class BatchItem(BaseModel):
    """Notification emitted as each file of a batch run finishes."""

    file_index: int = Field(..., description="Position in the directory scan")
    input_path: Path
    output_path: Optional[Path] = None
    status: BatchItemStatus
    error_message: Optional[str] = Field(None, description="Error message if failed")
    error_code: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    processing_time: Optional[float] = Field(
        None, description="Processing time in seconds"
    )
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def filename(self) -> str:
        return self.input_path.name


class BatchFailure(BaseModel):
    """A file that could not be converted."""

    path: Path
    error_message: str
    error_code: str


class BatchResult(BaseModel):
    """Aggregate outcome of one batch run."""

    batch_id: str
    input_dir: Path
    output_dir: Path
    target_format: SupportedFormat
    status: BatchStatus = BatchStatus.COMPLETED
    converted_count: int = Field(default=0, ge=0)
    failures: List[BatchFailure] = Field(default_factory=list)
    skipped: List[Path] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def attempted_count(self) -> int:
        return self.converted_count + self.failed_count

    @property
    def elapsed_seconds(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()
