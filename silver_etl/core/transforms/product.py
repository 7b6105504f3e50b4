"""
CRM product cleaning: split the composite product key and derive the end
date of each product version.
"""

from pyspark.sql import Column, DataFrame, Window
from pyspark.sql import functions as F

from silver_etl.core.schema import silver

from .common import normalize_code

PRODUCT_LINE_CODES = {
    "R": "Road",
    "M": "Mountain",
    "S": "Other Sales",
    "T": "Touring",
}
UNKNOWN_LINE = "N/A"

# prd_key layout: CC-CC-<item code>
CATEGORY_LENGTH = 5
ITEM_START = 7


def category_id(key: Column) -> Column:
    """First five characters of the product key, dashes as underscores."""
    return F.regexp_replace(key.substr(1, CATEGORY_LENGTH), "-", "_")


def item_key(key: Column) -> Column:
    """Product key from the seventh character on, dashes as underscores."""
    return F.regexp_replace(key.substr(F.lit(ITEM_START), F.length(key)), "-", "_")


def clean_products(df: DataFrame) -> DataFrame:
    """
    Clean a raw ``crm_prd_info`` batch.

    Every input row is kept. The end date of a row is the day before the
    next start date for the same raw product key; the latest version of a
    key is open-ended (null end date).
    Versions without a start date sort after dated ones, so they never
    bound a dated version and have no end date themselves.

    Args:
        df: Raw product batch (bronze.CRM_PRD_INFO layout)

    Returns:
        Product versions in silver.CRM_PRD_INFO layout
    """
    versions = Window.partitionBy("prd_key").orderBy(F.col("prd_start_dt").asc_nulls_last())
    cost = F.col("prd_cost")

    return df.withColumn(
        "prd_end_dt",
        F.date_sub(F.lead("prd_start_dt").over(versions), 1),
    ).select(
        F.col("prd_id"),
        category_id(F.col("prd_key")).alias("cat_id"),
        item_key(F.col("prd_key")).alias("prd_key"),
        F.col("prd_nm"),
        F.when(cost.isNull() | (cost < 0), F.lit(0)).otherwise(cost).alias("prd_cost"),
        normalize_code("prd_line", PRODUCT_LINE_CODES, UNKNOWN_LINE).alias("prd_line"),
        F.col("prd_start_dt").cast("date").alias("prd_start_dt"),
        F.col("prd_end_dt"),
    ).select(*silver.column_names(silver.CRM_PRD_INFO))
