"""
PipelineRunSummary model aggregating the entity loads of one run.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .load_result import LoadResult


class PipelineRunSummary(BaseModel):
    """
    Aggregated outcome of a full bronze -> silver run.

    Attributes:
        started_at: When the run began
        ended_at: When the last entity finished
        results: One LoadResult per attempted entity, in load order
    """

    started_at: datetime
    ended_at: datetime
    results: list[LoadResult] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    @property
    def failed_entities(self) -> list[str]:
        return [r.entity_name for r in self.results if not r.succeeded]

    @property
    def total_rows_written(self) -> int:
        return sum(r.rows_written for r in self.results)

    @property
    def duration_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()

    def result_for(self, entity_name: str) -> LoadResult | None:
        for result in self.results:
            if result.entity_name == entity_name:
                return result
        return None
