"""
Prometheus metrics for the silver-layer pipeline

Tracks per-entity load outcomes, durations and row counts so operators can
watch a run without parsing logs.
"""
import os
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# ENTITY LOAD METRICS
# =======================

entity_loads_total = Counter(
    name="silver_entity_loads_total",
    documentation="Entity loads attempted, by outcome",
    labelnames=["entity", "status"],  # status: success, failed
    registry=REGISTRY,
)

entity_rows_written_total = Counter(
    name="silver_entity_rows_written_total",
    documentation="Rows written to silver tables",
    labelnames=["entity"],
    registry=REGISTRY,
)

entity_load_duration_seconds = Histogram(
    name="silver_entity_load_duration_seconds",
    documentation="Wall time of a single entity load (transform + write)",
    labelnames=["entity"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    registry=REGISTRY,
)

entity_last_row_count = Gauge(
    name="silver_entity_last_row_count",
    documentation="Row count of the last successful load per entity",
    labelnames=["entity"],
    registry=REGISTRY,
)

# =======================
# ERROR METRICS
# =======================

error_log_write_failures_total = Counter(
    name="silver_error_log_write_failures_total",
    documentation="Error-log entries that could not be persisted",
    registry=REGISTRY,
)

pipeline_runs_total = Counter(
    name="silver_pipeline_runs_total",
    documentation="Completed pipeline runs, by outcome",
    labelnames=["status"],  # status: success, partial
    registry=REGISTRY,
)


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def record_entity_load(
    entity: str,
    succeeded: bool,
    rows_written: int,
    duration_seconds: float
) -> None:
    """
    Record the outcome of one entity load.

    Args:
        entity: Entity name
        succeeded: Whether the load committed
        rows_written: Rows written to the silver table
        duration_seconds: Load duration in seconds
    """
    status = "success" if succeeded else "failed"
    entity_loads_total.labels(entity=entity, status=status).inc()
    entity_load_duration_seconds.labels(entity=entity).observe(duration_seconds)

    if succeeded:
        entity_rows_written_total.labels(entity=entity).inc(rows_written)
        entity_last_row_count.labels(entity=entity).set(rows_written)


def record_pipeline_run(error_count: int) -> None:
    """Record a finished pipeline run"""
    status = "success" if error_count == 0 else "partial"
    pipeline_runs_total.labels(status=status).inc()


def record_error_log_write_failure() -> None:
    """Record an error-log entry that could not be persisted"""
    error_log_write_failures_total.inc()
