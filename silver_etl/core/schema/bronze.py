"""
Spark schemas for the raw (bronze) entity batches.

Field names follow the source systems: CRM exports use the ``cst_``,
``prd_`` and ``sls_`` prefixes, ERP exports use short upper-case headers
that are lower-cased here.
"""

from pyspark.sql.types import (
    DateType,
    IntegerType,
    StringType,
    StructField,
    StructType,
)

CRM_CUST_INFO = StructType([
    StructField("cst_id", IntegerType(), True),
    StructField("cst_key", StringType(), True),
    StructField("cst_firstname", StringType(), True),
    StructField("cst_lastname", StringType(), True),
    StructField("cst_marital_status", StringType(), True),
    StructField("cst_gndr", StringType(), True),
    StructField("cst_create_date", DateType(), True),
])

CRM_PRD_INFO = StructType([
    StructField("prd_id", IntegerType(), True),
    StructField("prd_key", StringType(), True),
    StructField("prd_nm", StringType(), True),
    StructField("prd_cost", IntegerType(), True),
    StructField("prd_line", StringType(), True),
    StructField("prd_start_dt", DateType(), True),
    StructField("prd_end_dt", DateType(), True),
])

# Dates arrive as yyyyMMdd integers
CRM_SALES_DETAILS = StructType([
    StructField("sls_ord_num", StringType(), True),
    StructField("sls_prd_key", StringType(), True),
    StructField("sls_cust_id", IntegerType(), True),
    StructField("sls_order_dt", IntegerType(), True),
    StructField("sls_ship_dt", IntegerType(), True),
    StructField("sls_due_dt", IntegerType(), True),
    StructField("sls_sales", IntegerType(), True),
    StructField("sls_quantity", IntegerType(), True),
    StructField("sls_price", IntegerType(), True),
])

ERP_CUST_AZ12 = StructType([
    StructField("cid", StringType(), True),
    StructField("bdate", DateType(), True),
    StructField("gen", StringType(), True),
])

ERP_LOC_A101 = StructType([
    StructField("cid", StringType(), True),
    StructField("cntry", StringType(), True),
])

ERP_PX_CAT_G1V2 = StructType([
    StructField("id", StringType(), True),
    StructField("cat", StringType(), True),
    StructField("subcat", StringType(), True),
    StructField("maintenance", StringType(), True),
])
