"""Data models for the TMDb person change feed and sync state."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ChangedPerson(BaseModel):
    """One entry of the person change feed."""

    id: int | str = Field(default=..., description="TMDb person id")
    adult: bool | None = Field(default=None, description="Adult flag reported by TMDb")

    @property
    def person_id(self) -> str:
        """Person id as a string, the form used for local directory names."""
        return str(self.id)


class PersonChangesPage(BaseModel):
    """One decoded page of the person change feed."""

    results: list[ChangedPerson] = Field(default_factory=list)
    page: int = Field(default=1, ge=0)
    total_pages: int = Field(default=0, ge=0)
    total_results: int = Field(default=0, ge=0)

    @field_validator("results", mode="before")
    @classmethod
    def _null_results_as_empty(cls, value):
        return [] if value is None else value

    @property
    def person_ids(self) -> list[str]:
        return [result.person_id for result in self.results]

    model_config = {
        "json_schema_extra": {
            "example": {
                "results": [{"id": 287, "adult": False}, {"id": 1245, "adult": None}],
                "page": 1,
                "total_pages": 3,
                "total_results": 250,
            }
        }
    }


class SyncCursor(BaseModel):
    """Both facts kept by the cursor file.

    ``last_attempted_at`` is when a run last committed (file modification time),
    ``last_synced_through`` is the feed timestamp that run covered (file content).
    """

    last_attempted_at: datetime | None = Field(
        default=None, description="When the cursor was last written"
    )
    last_synced_through: datetime | None = Field(
        default=None, description="Timestamp the change feed was consulted through"
    )

    @property
    def has_baseline(self) -> bool:
        return self.last_synced_through is not None
