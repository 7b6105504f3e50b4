"""
Silver table writer.

Replaces the full contents of a silver table with a cleaned batch
(full refresh). The new rows are staged in a temporary table and swapped in
inside one transaction, so concurrent readers see either the previous or
the new contents, never a partially written or empty table.
"""

import psycopg
from psycopg import sql
from pyspark.sql import DataFrame

from silver_etl.core.entities import get_entity
from silver_etl.core.exceptions import StoreUnavailableError
from silver_etl.observability.logger import get_logger
from silver_etl.warehouse.connection import DatabaseConnectionPool, is_connection_lost

logger = get_logger(__name__)


class SilverTableWriter:
    """
    Writes cleaned batches from Spark DataFrames to the silver schema.
    """

    def __init__(self, pool: DatabaseConnectionPool, schema: str = "silver"):
        """
        Initialize silver writer.

        Args:
            pool: Database connection pool
            schema: Silver schema name
        """
        self.pool = pool
        self.schema = schema

    def replace(self, entity_name: str, df: DataFrame) -> int:
        """
        Replace the silver table of ``entity_name`` with ``df``.

        Args:
            entity_name: Entity (and table) name
            df: Cleaned batch in the entity's silver layout

        Returns:
            Number of rows now in the table

        Raises:
            StoreUnavailableError: If the database cannot be reached
            psycopg.Error: Any other database failure, such as a statement
                or lock timeout on this table
        """
        entity = get_entity(entity_name)
        columns = entity.silver_column_names

        # Evaluates the transform; Spark errors surface here
        rows = [tuple(row[name] for name in columns) for row in df.select(*columns).collect()]

        target = sql.Identifier(self.schema, entity.name)
        stage = sql.Identifier(f"stage_{entity.name}")
        column_list = sql.SQL(", ").join(sql.Identifier(name) for name in columns)

        try:
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        cur.execute(
                            sql.SQL(
                                "CREATE TEMP TABLE {} (LIKE {} INCLUDING DEFAULTS) ON COMMIT DROP"
                            ).format(stage, target)
                        )
                        if rows:
                            cur.executemany(
                                sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
                                    stage,
                                    column_list,
                                    sql.SQL(", ").join(sql.Placeholder() * len(columns)),
                                ),
                                rows,
                            )
                        cur.execute(sql.SQL("DELETE FROM {}").format(target))
                        cur.execute(
                            sql.SQL("INSERT INTO {} ({}) SELECT {} FROM {}").format(
                                target, column_list, column_list, stage
                            )
                        )
                        written = cur.rowcount
        except psycopg.OperationalError as e:
            if not is_connection_lost(e):
                raise
            raise StoreUnavailableError(
                f"Silver store unavailable while writing {entity.name}: {e}"
            ) from e

        logger.info(f"Replaced {self.schema}.{entity.name} with {written} rows")
        return written

    def __call__(self, entity_name: str, df: DataFrame) -> int:
        return self.replace(entity_name, df)
