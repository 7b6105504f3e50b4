"""
Error log operations for failed entity loads.

This module provides the append-only error sink used by the batch loader
and query helpers for operators.
"""

from datetime import datetime

import psycopg
from psycopg import sql

from silver_etl.core.exceptions import StoreUnavailableError
from silver_etl.core.models import ErrorLogEntry
from silver_etl.observability import metrics
from silver_etl.observability.logger import get_logger

from .connection import DatabaseConnectionPool
from .schema_mgmt import ERROR_LOG_TABLE

logger = get_logger(__name__)


def insert_error_log(
    pool: DatabaseConnectionPool,
    entry: ErrorLogEntry,
    schema: str = "silver"
) -> int:
    """
    Insert a single error log entry into the database.

    Args:
        pool: Database connection pool
        entry: ErrorLogEntry model instance
        schema: Schema holding the error log table

    Returns:
        error_id: Generated error ID

    Raises:
        psycopg.Error: If insert fails
    """
    insert_sql = sql.SQL(
        """
        INSERT INTO {}.{} (entity_name, error_message, occurred_at)
        VALUES (%(entity_name)s, %(error_message)s, %(occurred_at)s)
        RETURNING error_id
        """
    ).format(sql.Identifier(schema), sql.Identifier(ERROR_LOG_TABLE))

    with pool.get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(
                insert_sql,
                {
                    "entity_name": entry.entity_name,
                    "error_message": entry.error_message,
                    "occurred_at": entry.occurred_at,
                },
            )
            row = cur.fetchone()
        conn.commit()

    error_id = row["error_id"] if row else None
    logger.debug(f"Inserted error log entry: error_id={error_id}, entity={entry.entity_name}")
    return error_id


def query_error_log(
    pool: DatabaseConnectionPool,
    schema: str = "silver",
    entity_name: str | None = None,
    since: datetime | None = None,
    limit: int = 50
) -> list[ErrorLogEntry]:
    """
    Fetch error log entries, newest first.

    Args:
        pool: Database connection pool
        schema: Schema holding the error log table
        entity_name: Only entries for this entity (optional)
        since: Only entries at or after this time (optional)
        limit: Maximum number of entries

    Returns:
        List of ErrorLogEntry
    """
    conditions = []
    params: dict = {"limit": limit}

    if entity_name:
        conditions.append(sql.SQL("entity_name = %(entity_name)s"))
        params["entity_name"] = entity_name
    if since:
        conditions.append(sql.SQL("occurred_at >= %(since)s"))
        params["since"] = since

    where = sql.SQL("")
    if conditions:
        where = sql.SQL("WHERE ") + sql.SQL(" AND ").join(conditions)

    query = sql.SQL(
        """
        SELECT error_id, entity_name, error_message, occurred_at
        FROM {}.{}
        {}
        ORDER BY occurred_at DESC, error_id DESC
        LIMIT %(limit)s
        """
    ).format(sql.Identifier(schema), sql.Identifier(ERROR_LOG_TABLE), where)

    rows = pool.execute_query(query, params)
    return [ErrorLogEntry(**row) for row in rows]


class ErrorLogSink:
    """
    Append-only sink for entity load failures.

    Every entry is kept in memory for the run summary. When a pool is given,
    entries are also persisted to ``<schema>.error_log``. Recording never
    raises: a failed insert is logged and counted instead.
    """

    def __init__(self, pool: DatabaseConnectionPool | None = None, schema: str = "silver"):
        """
        Initialize the sink.

        Args:
            pool: Database connection pool, or None for an in-memory sink
            schema: Schema holding the error log table
        """
        self.pool = pool
        self.schema = schema
        self._entries: list[ErrorLogEntry] = []

    @property
    def entries(self) -> list[ErrorLogEntry]:
        return list(self._entries)

    def record(self, entity_name: str, message: str) -> ErrorLogEntry:
        """
        Append a failure for ``entity_name``.

        Args:
            entity_name: Entity whose load failed
            message: Failure message

        Returns:
            The recorded entry (error_id set when persisted)
        """
        entry = ErrorLogEntry(entity_name=entity_name, error_message=message)

        if self.pool is not None:
            try:
                entry.error_id = insert_error_log(self.pool, entry, self.schema)
            except (psycopg.Error, RuntimeError, StoreUnavailableError) as e:
                metrics.record_error_log_write_failure()
                logger.error(
                    f"Could not persist error log entry for {entity_name}: {e}",
                    extra={"entity": entity_name, "error_message": message},
                )

        self._entries.append(entry)
        return entry
