"""
ErrorLogEntry model representing one failed entity load.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorLogEntry(BaseModel):
    """
    Append-only record of an entity load that failed.

    Attributes:
        error_id: Auto-increment primary key (set once persisted)
        entity_name: Entity whose load failed (e.g. "crm_cust_info")
        error_message: Failure message as reported by the transform or writer
        occurred_at: When the failure was caught
    """

    error_id: int | None = None
    entity_name: str = Field(..., min_length=1, max_length=100)
    error_message: str
    occurred_at: datetime = Field(default_factory=_utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "error_id": 1,
                "entity_name": "crm_sales_details",
                "error_message": "AnalysisException: cannot resolve 'sls_price'",
                "occurred_at": "2025-11-17T08:30:00Z"
            }
        }
