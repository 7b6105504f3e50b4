"""
Spark session factory for batch runs.
"""

from pyspark.sql import SparkSession

# Malformed values in bronze extracts must yield null, not fail the batch
SESSION_CONFIG = {
    "spark.sql.ansi.enabled": "false",
    "spark.sql.legacy.timeParserPolicy": "CORRECTED",
    "spark.sql.session.timeZone": "UTC",
    "spark.sql.adaptive.enabled": "true",
}


def create_spark_session(
    app_name: str = "silver-etl",
    master: str = "local[*]",
    shuffle_partitions: int = 8,
    **extra_config: str
) -> SparkSession:
    """
    Create (or reuse) the Spark session for batch processing.

    Args:
        app_name: Application name
        master: Spark master URL
        shuffle_partitions: Value for spark.sql.shuffle.partitions
        **extra_config: Additional Spark settings keyed by their full name,
            e.g. **{"spark.ui.enabled": "false"}

    Returns:
        SparkSession
    """
    builder = SparkSession.builder \
        .appName(app_name) \
        .master(master) \
        .config("spark.sql.shuffle.partitions", str(shuffle_partitions))

    for key, value in {**SESSION_CONFIG, **extra_config}.items():
        builder = builder.config(key, value)

    spark = builder.getOrCreate()

    # getOrCreate may hand back an existing session; SQL settings are per session
    for key, value in SESSION_CONFIG.items():
        spark.conf.set(key, value)

    return spark
