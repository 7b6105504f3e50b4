"""
CRM sales-line cleaning: integer dates to calendar dates and repair of
sales amount / unit price.
"""

from pyspark.sql import DataFrame
from pyspark.sql import functions as F

from silver_etl.core.schema import silver

from .common import yyyymmdd_to_date

DATE_COLUMNS = ("sls_order_dt", "sls_ship_dt", "sls_due_dt")


def clean_sales(df: DataFrame) -> DataFrame:
    """
    Clean a raw ``crm_sales_details`` batch.

    Sales is repaired first, from quantity and the absolute original price.
    Price is repaired second, from the (possibly repaired) sales and the
    quantity; a zero quantity yields a null price.

    Args:
        df: Raw sales batch (bronze.CRM_SALES_DETAILS layout)

    Returns:
        Sales lines in silver.CRM_SALES_DETAILS layout
    """
    quantity = F.col("sls_quantity")
    price = F.col("sls_price")
    sales = F.col("sls_sales")
    expected_sales = quantity * F.abs(price)

    repaired = df.withColumn(
        "sls_sales",
        F.when(
            sales.isNull() | (sales <= 0) | (sales != expected_sales),
            expected_sales,
        ).otherwise(sales),
    ).withColumn(
        "sls_price",
        F.when(
            price.isNull() | (price <= 0),
            F.when(quantity != 0, (F.col("sls_sales") / quantity).cast("int")),
        ).otherwise(price),
    )

    for name in DATE_COLUMNS:
        repaired = repaired.withColumn(name, yyyymmdd_to_date(name))

    return repaired.withColumn(
        "sls_ord_num", F.trim(F.col("sls_ord_num"))
    ).select(*silver.column_names(silver.CRM_SALES_DETAILS))
