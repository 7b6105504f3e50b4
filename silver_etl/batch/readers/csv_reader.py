"""
CSV reader for raw (bronze) extracts.
"""

from pathlib import Path

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

from silver_etl.core.entities import EntityDefinition


class CSVReader:
    """
    Reads CSV files into Spark with an explicit schema.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read(
        self,
        file_path: str,
        schema: StructType,
        header: bool = True,
        delimiter: str = ",",
    ) -> DataFrame:
        """
        Read CSV file into Spark DataFrame.

        Columns are matched by position, so header names in the file may
        differ from the schema's field names. Values that do not fit the
        schema's type are read as null.

        Args:
            file_path: Path to CSV file
            schema: Explicit schema
            header: Whether CSV has header row
            delimiter: Field delimiter

        Returns:
            Spark DataFrame
        """
        return self.spark.read \
            .schema(schema) \
            .option("header", str(header).lower()) \
            .option("delimiter", delimiter) \
            .option("mode", "PERMISSIVE") \
            .option("dateFormat", "yyyy-MM-dd") \
            .csv(file_path)


class CSVBronzeReader:
    """
    Reads an entity's raw batch from ``<directory>/<source_file>``.
    """

    def __init__(self, spark: SparkSession, directory: str | Path):
        self.directory = Path(directory)
        self.csv_reader = CSVReader(spark)

    def read(self, entity: EntityDefinition) -> DataFrame:
        """
        Read the raw batch for ``entity``.

        Raises:
            FileNotFoundError: If the entity's export is missing
        """
        path = self.directory / entity.source_file
        if not path.exists():
            raise FileNotFoundError(f"Raw extract not found for {entity.name}: {path}")

        return self.csv_reader.read(str(path), schema=entity.bronze_schema)
