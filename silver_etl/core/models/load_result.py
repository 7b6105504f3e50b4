"""
LoadResult model representing the outcome of one entity load (ephemeral).
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoadResult(BaseModel):
    """
    Outcome of loading one entity from bronze into silver.

    Note: LoadResult is ephemeral; failures are persisted separately
    through the error log.

    Attributes:
        entity_name: Entity that was loaded
        status: "success" when the silver table was replaced, "failed" otherwise
        rows_written: Rows now in the silver table (0 on failure)
        error_message: Failure message, only set when status is "failed"
        started_at: When the load began
        ended_at: When the load finished
        duration_seconds: ended_at - started_at in seconds
    """

    entity_name: str = Field(..., min_length=1)
    status: Literal["success", "failed"]
    rows_written: int = Field(0, ge=0)
    error_message: str | None = None
    started_at: datetime
    ended_at: datetime
    duration_seconds: float = Field(..., ge=0.0)

    @field_validator("error_message")
    @classmethod
    def check_status_consistency(cls, v, info):
        """A successful load carries no error message."""
        if info.data.get("status") == "success" and v is not None:
            raise ValueError("status='success' but error_message is set")
        return v

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(
        cls,
        entity_name: str,
        rows_written: int,
        started_at: datetime,
        ended_at: datetime,
        duration_seconds: float
    ) -> "LoadResult":
        return cls(
            entity_name=entity_name,
            status="success",
            rows_written=rows_written,
            started_at=started_at,
            ended_at=ended_at,
            duration_seconds=duration_seconds,
        )

    @classmethod
    def failure(
        cls,
        entity_name: str,
        error_message: str,
        started_at: datetime,
        ended_at: datetime,
        duration_seconds: float
    ) -> "LoadResult":
        return cls(
            entity_name=entity_name,
            status="failed",
            error_message=error_message,
            started_at=started_at,
            ended_at=ended_at,
            duration_seconds=duration_seconds,
        )
