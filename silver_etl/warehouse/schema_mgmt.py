"""
Schema management for the warehouse.

Creates the bronze and silver tables and the silver error log. Table
creation is idempotent (IF NOT EXISTS); existing tables are never altered.
"""

from typing import Iterable

from psycopg import sql
from pyspark.sql.types import DataType, DateType, IntegerType, StringType, TimestampType

from silver_etl.core.entities import DEFAULT_LOAD_ORDER, EntityDefinition, get_entity
from silver_etl.core.schema import silver
from silver_etl.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

ERROR_LOG_TABLE = "error_log"

# Bronze tables mirror the Spark schema of the raw batch
SPARK_TO_POSTGRES = {
    IntegerType: "INT",
    StringType: "VARCHAR(50)",
    DateType: "DATE",
    TimestampType: "TIMESTAMP",
}


def _postgres_type(data_type: DataType) -> str:
    try:
        return SPARK_TO_POSTGRES[type(data_type)]
    except KeyError:
        raise ValueError(f"No Postgres mapping for Spark type {data_type.simpleString()}") from None


def silver_table_ddl(schema: str, entity: EntityDefinition) -> sql.Composed:
    """CREATE TABLE statement for an entity's silver table."""
    columns = [
        sql.SQL("{} {}").format(sql.Identifier(name), sql.SQL(pg_type))
        for name, pg_type in [*entity.silver_columns, silver.AUDIT_COLUMN]
    ]
    return sql.SQL("CREATE TABLE IF NOT EXISTS {}.{} ({})").format(
        sql.Identifier(schema),
        sql.Identifier(entity.name),
        sql.SQL(", ").join(columns),
    )


def bronze_table_ddl(schema: str, entity: EntityDefinition) -> sql.Composed:
    """CREATE TABLE statement for an entity's bronze table."""
    columns = [
        sql.SQL("{} {}").format(sql.Identifier(field.name), sql.SQL(_postgres_type(field.dataType)))
        for field in entity.bronze_schema.fields
    ]
    return sql.SQL("CREATE TABLE IF NOT EXISTS {}.{} ({})").format(
        sql.Identifier(schema),
        sql.Identifier(entity.name),
        sql.SQL(", ").join(columns),
    )


def error_log_ddl(schema: str) -> sql.Composed:
    """CREATE TABLE statement for the silver error log."""
    return sql.SQL(
        """
        CREATE TABLE IF NOT EXISTS {}.{} (
            error_id SERIAL PRIMARY KEY,
            entity_name VARCHAR(100) NOT NULL,
            error_message TEXT,
            occurred_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    ).format(sql.Identifier(schema), sql.Identifier(ERROR_LOG_TABLE))


class SchemaManager:
    """
    Creates warehouse schemas and tables.

    Handles:
    - Silver schema, one table per entity, and the error log
    - Bronze schema and tables, for loading raw extracts into Postgres
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def ensure_silver_schema(
        self,
        schema: str = "silver",
        entities: Iterable[str] = DEFAULT_LOAD_ORDER
    ) -> None:
        """
        Create the silver schema, its entity tables and the error log.

        Args:
            schema: Silver schema name
            entities: Entities whose tables to create
        """
        statements = [sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))]
        statements += [silver_table_ddl(schema, get_entity(name)) for name in entities]
        statements.append(error_log_ddl(schema))

        self._execute_all(statements)
        logger.info(f"Silver schema '{schema}' is ready")

    def ensure_bronze_schema(
        self,
        schema: str = "bronze",
        entities: Iterable[str] = DEFAULT_LOAD_ORDER
    ) -> None:
        """
        Create the bronze schema and its entity tables.

        Args:
            schema: Bronze schema name
            entities: Entities whose tables to create
        """
        statements = [sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))]
        statements += [bronze_table_ddl(schema, get_entity(name)) for name in entities]

        self._execute_all(statements)
        logger.info(f"Bronze schema '{schema}' is ready")

    def _execute_all(self, statements: list[sql.Composable]) -> None:
        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    for statement in statements:
                        cur.execute(statement)
