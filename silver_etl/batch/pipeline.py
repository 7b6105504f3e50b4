"""
Bronze -> silver pipeline orchestration.

Loads every configured entity in a fixed order:
read raw batch -> clean -> replace silver table
"""

from datetime import datetime, timezone
from typing import Iterable, Protocol

from pyspark.sql import DataFrame

from silver_etl.core.entities import DEFAULT_LOAD_ORDER, EntityDefinition, get_entity
from silver_etl.core.exceptions import EntityTransformError
from silver_etl.core.models import PipelineRunSummary
from silver_etl.observability import metrics
from silver_etl.observability.logger import get_logger, log_operation
from silver_etl.warehouse.error_log import ErrorLogSink

from .loader import BatchLoader, WriteFn

logger = get_logger(__name__)


class BronzeReader(Protocol):
    def read(self, entity: EntityDefinition) -> DataFrame:
        ...


class SilverPipeline:
    """
    Runs the bronze -> silver load for all entities.

    Flow per entity (sequential, in load order):
    1. Read the raw batch
    2. Apply the entity's cleaning transform
    3. Replace the entity's silver table

    A failing entity is recorded in the error log and the run continues
    with the next one.
    """

    def __init__(
        self,
        reader: BronzeReader,
        write_fn: WriteFn,
        error_sink: ErrorLogSink,
        entities: Iterable[str] = DEFAULT_LOAD_ORDER
    ):
        """
        Initialize the pipeline.

        Args:
            reader: Source of raw batches
            write_fn: Writer replacing a silver table, e.g. SilverTableWriter
            error_sink: Sink for failed entity loads
            entities: Entity names, in load order
        """
        self.reader = reader
        self.write_fn = write_fn
        self.error_sink = error_sink
        self.entities = [get_entity(name) for name in entities]
        self.loader = BatchLoader(error_sink)

    def run(self) -> PipelineRunSummary:
        """
        Load every entity once.

        Returns:
            PipelineRunSummary with one LoadResult per entity

        Raises:
            StoreUnavailableError: If the silver store cannot be reached
        """
        started_at = datetime.now(timezone.utc)
        results = []

        with log_operation("Silver layer load", logger=logger, entity_count=len(self.entities)):
            for entity in self.entities:
                result = self.loader.load(
                    entity.name,
                    lambda entity=entity: self.reader.read(entity),
                    lambda df, entity=entity: self._transform(entity, df),
                    self.write_fn,
                )
                results.append(result)

        summary = PipelineRunSummary(
            started_at=started_at,
            ended_at=datetime.now(timezone.utc),
            results=results,
        )
        metrics.record_pipeline_run(summary.error_count)

        logger.info(
            f"Silver layer load finished: {len(results) - summary.error_count} succeeded, "
            f"{summary.error_count} failed",
            extra={
                "error_count": summary.error_count,
                "failed_entities": summary.failed_entities,
                "rows_written": summary.total_rows_written,
                "duration_seconds": round(summary.duration_seconds, 3),
            },
        )
        return summary

    @staticmethod
    def _transform(entity: EntityDefinition, df: DataFrame) -> DataFrame:
        cleaned = entity.transform(df)
        if cleaned.columns != entity.silver_column_names:
            raise EntityTransformError(
                entity.name,
                f"transform produced columns {cleaned.columns}, "
                f"expected {entity.silver_column_names}",
            )
        return cleaned
