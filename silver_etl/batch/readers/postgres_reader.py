"""
Reader for raw (bronze) batches stored in PostgreSQL.
"""

from psycopg import sql
from pyspark.sql import DataFrame, SparkSession

from silver_etl.core.entities import EntityDefinition
from silver_etl.observability.logger import get_logger
from silver_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)


class PostgresBronzeReader:
    """
    Reads an entity's raw batch from ``<schema>.<entity>`` into Spark.

    Rows are fetched through the pool and handed to Spark in table order
    with the entity's bronze schema.
    """

    def __init__(self, spark: SparkSession, pool: DatabaseConnectionPool, schema: str = "bronze"):
        """
        Initialize the reader.

        Args:
            spark: Active Spark session
            pool: Database connection pool
            schema: Schema holding the bronze tables
        """
        self.spark = spark
        self.pool = pool
        self.schema = schema

    def read(self, entity: EntityDefinition) -> DataFrame:
        """
        Read the raw batch for ``entity``.

        Args:
            entity: Entity to read

        Returns:
            Spark DataFrame in the entity's bronze layout
        """
        fields = entity.bronze_schema.fieldNames()
        query = sql.SQL("SELECT {} FROM {}.{}").format(
            sql.SQL(", ").join(sql.Identifier(name) for name in fields),
            sql.Identifier(self.schema),
            sql.Identifier(entity.name),
        )

        rows = self.pool.execute_query(query)
        logger.info(f"Read {len(rows)} raw rows from {self.schema}.{entity.name}")

        data = [tuple(row[name] for name in fields) for row in rows]
        return self.spark.createDataFrame(data, schema=entity.bronze_schema)
