"""Data models for synchronization operations."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class SyncOutcome(str, Enum):
    """How a person updates run ended."""

    DISABLED = "disabled"
    NOT_DUE = "not_due"
    BOOTSTRAPPED = "bootstrapped"
    COMPLETED = "completed"


class SyncReport(BaseModel):
    """Report of a person updates run."""

    outcome: SyncOutcome = Field(..., description="How the run ended")
    start_date: date | None = Field(
        default=None, description="Effective start date used to query the change feed"
    )
    changed_ids: int = Field(default=0, ge=0, description="Ids returned by the change feed")
    candidate_ids: int = Field(
        default=0, ge=0, description="Changed ids that are cached locally"
    )
    refreshed: int = Field(default=0, ge=0, description="People refreshed successfully")
    failed_ids: list[str] = Field(
        default_factory=list, description="People whose refresh failed"
    )
    start_time: datetime = Field(..., description="Run start timestamp")
    end_time: datetime = Field(..., description="Run end timestamp")

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def cursor_committed(self) -> bool:
        """Whether the run wrote the cursor file."""
        return self.outcome in (SyncOutcome.BOOTSTRAPPED, SyncOutcome.COMPLETED)

    @property
    def success(self) -> bool:
        """Check if the run finished without per-person failures."""
        return len(self.failed_ids) == 0
