"""
Error-isolated loading of a single entity.

Runs transform -> write for one entity and turns any failure into a
failed LoadResult plus an error log entry, so the caller can move on to
the next entity.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Union

from pyspark.sql import DataFrame

from silver_etl.core.exceptions import StoreUnavailableError
from silver_etl.core.models import LoadResult
from silver_etl.observability import metrics
from silver_etl.observability.logger import entity_logger, get_logger
from silver_etl.warehouse.error_log import ErrorLogSink

logger = get_logger(__name__)

RawBatch = Union[DataFrame, Callable[[], DataFrame]]
TransformFn = Callable[[DataFrame], DataFrame]
WriteFn = Callable[[str, DataFrame], int]


def describe_error(exc: BaseException) -> str:
    """One-line message for the error log: exception type and first line."""
    text = str(exc).strip().splitlines()
    return f"{type(exc).__name__}: {text[0]}" if text else type(exc).__name__


class BatchLoader:
    """
    Loads one entity at a time with failure isolation.

    Every failure except an unreachable store is caught, recorded in the
    error sink, and reported as a failed LoadResult. An unreachable store
    affects every entity equally and is re-raised.
    """

    def __init__(self, error_sink: ErrorLogSink):
        """
        Initialize the loader.

        Args:
            error_sink: Sink receiving one entry per failed load
        """
        self.error_sink = error_sink

    def load(
        self,
        entity_name: str,
        raw_batch: RawBatch,
        transform_fn: TransformFn,
        write_fn: WriteFn
    ) -> LoadResult:
        """
        Transform ``raw_batch`` and replace the entity's silver table.

        Args:
            entity_name: Entity being loaded
            raw_batch: Raw DataFrame, or a zero-argument callable producing it
                (reading the batch is then isolated too)
            transform_fn: Cleaning function for this entity
            write_fn: Writer called as write_fn(entity_name, cleaned_df),
                returning the number of rows written

        Returns:
            LoadResult describing the outcome

        Raises:
            StoreUnavailableError: If the destination store cannot be reached
        """
        log = entity_logger(entity_name, logger)
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        log.info(f"Loading {entity_name}", extra={"started_at": started_at.isoformat()})

        error_message = None
        rows_written = 0
        try:
            batch = raw_batch() if callable(raw_batch) else raw_batch
            cleaned = transform_fn(batch)
            rows_written = write_fn(entity_name, cleaned)
        except StoreUnavailableError:
            log.critical(f"Destination store unavailable while loading {entity_name}")
            raise
        except Exception as e:
            error_message = describe_error(e)
            log.error(f"Error loading {entity_name}: {error_message}", exc_info=True)
            self.error_sink.record(entity_name, error_message)

        ended_at = datetime.now(timezone.utc)
        duration = time.perf_counter() - start

        if error_message is None:
            result = LoadResult.success(entity_name, rows_written, started_at, ended_at, duration)
            log.info(
                f"Loaded {entity_name}: {rows_written} rows",
                extra={
                    "status": result.status,
                    "rows_written": rows_written,
                    "ended_at": ended_at.isoformat(),
                    "duration_seconds": round(duration, 3),
                },
            )
        else:
            result = LoadResult.failure(entity_name, error_message, started_at, ended_at, duration)
            log.info(
                f"Finished {entity_name} with errors",
                extra={
                    "status": result.status,
                    "ended_at": ended_at.isoformat(),
                    "duration_seconds": round(duration, 3),
                },
            )

        metrics.record_entity_load(entity_name, result.succeeded, rows_written, duration)
        return result
