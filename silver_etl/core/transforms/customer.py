"""
CRM customer cleaning: keep the latest record per customer and normalize
names and codes.
"""

from pyspark.sql import DataFrame, Window
from pyspark.sql import functions as F

from silver_etl.core.schema import silver

from .common import normalize_code

MARITAL_STATUS_CODES = {"S": "Single", "M": "Married"}
GENDER_CODES = {"F": "Female", "M": "Male"}
UNKNOWN = "n/a"

_INPUT_ORDER = "_input_order"
_RECENCY_RANK = "_recency_rank"


def clean_customers(df: DataFrame) -> DataFrame:
    """
    Clean a raw ``crm_cust_info`` batch.

    Rows without ``cst_id`` are dropped. For each ``cst_id`` only the row
    with the latest ``cst_create_date`` survives; rows with the same date
    are resolved in favour of the one seen first in the batch, and missing
    dates lose to any real date.

    Args:
        df: Raw customer batch (bronze.CRM_CUST_INFO layout)

    Returns:
        One row per customer in silver.CRM_CUST_INFO layout
    """
    recency = Window.partitionBy("cst_id").orderBy(
        F.col("cst_create_date").desc_nulls_last(),
        F.col(_INPUT_ORDER).asc(),
    )

    latest = (
        df.withColumn(_INPUT_ORDER, F.monotonically_increasing_id())
        .filter(F.col("cst_id").isNotNull())
        .withColumn(_RECENCY_RANK, F.row_number().over(recency))
        .filter(F.col(_RECENCY_RANK) == 1)
    )

    return latest.select(
        F.col("cst_id"),
        F.col("cst_key"),
        F.trim(F.col("cst_firstname")).alias("cst_firstname"),
        F.trim(F.col("cst_lastname")).alias("cst_lastname"),
        normalize_code("cst_marital_status", MARITAL_STATUS_CODES, UNKNOWN).alias("cst_marital_status"),
        normalize_code("cst_gndr", GENDER_CODES, UNKNOWN).alias("cst_gndr"),
        F.col("cst_create_date"),
    ).select(*silver.column_names(silver.CRM_CUST_INFO))
