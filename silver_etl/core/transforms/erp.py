"""
ERP extract cleaning: customer attributes, customer locations and the
product category reference.
"""

from datetime import date

from pyspark.sql import DataFrame
from pyspark.sql import functions as F

from silver_etl.core.schema import silver

from .common import normalize_code, strip_prefix

CUSTOMER_ID_PREFIX = "NAS"
GENDER_CODES = {
    "F": "FEMALE",
    "FEMALE": "FEMALE",
    "M": "MALE",
    "MALE": "MALE",
}
UNKNOWN_GENDER = "N/A"

COUNTRY_NAMES = {
    "DE": "Germany",
    "US": "United States",
    "USA": "United States",
}
UNKNOWN_COUNTRY = "n/a"


def clean_customer_attributes(df: DataFrame, as_of: date | None = None) -> DataFrame:
    """
    Clean a raw ``erp_cust_az12`` batch.

    Args:
        df: Raw batch (bronze.ERP_CUST_AZ12 layout)
        as_of: Reference day for rejecting future birth dates,
            defaults to the current date

    Returns:
        Customer attributes in silver.ERP_CUST_AZ12 layout
    """
    today = F.lit(as_of) if as_of is not None else F.current_date()

    return df.select(
        strip_prefix("cid", CUSTOMER_ID_PREFIX).alias("cid"),
        F.when(F.col("bdate") <= today, F.col("bdate")).alias("bdate"),
        normalize_code("gen", GENDER_CODES, UNKNOWN_GENDER).alias("gen"),
    ).select(*silver.column_names(silver.ERP_CUST_AZ12))


def clean_customer_locations(df: DataFrame) -> DataFrame:
    """
    Clean a raw ``erp_loc_a101`` batch.

    Dashes are removed from the customer id so it matches ``cst_key``;
    country codes are expanded and blanks become "n/a". Country matching
    is case-sensitive, unknown values are kept trimmed.
    """
    country = F.trim(F.col("cntry"))

    expr = F.when(F.col("cntry").isNull() | (country == ""), UNKNOWN_COUNTRY)
    for code, name in COUNTRY_NAMES.items():
        expr = expr.when(country == code, name)

    return df.select(
        F.regexp_replace(F.col("cid"), "-", "").alias("cid"),
        expr.otherwise(country).alias("cntry"),
    ).select(*silver.column_names(silver.ERP_LOC_A101))


def clean_product_categories(df: DataFrame) -> DataFrame:
    """Clean a raw ``erp_px_cat_g1v2`` batch (whitespace only)."""
    return df.select(
        *[F.trim(F.col(name)).alias(name) for name in silver.column_names(silver.ERP_PX_CAT_G1V2)]
    )
