"""
Column layout of the cleaned (silver) tables.

Each table is a list of ``(column_name, postgres_type)`` pairs in the order
the transforms emit them. The ``dwh_create_date`` audit column is filled by
the database default and never written by the pipeline.
"""

from typing import List, Tuple

Columns = List[Tuple[str, str]]

AUDIT_COLUMN = ("dwh_create_date", "TIMESTAMP DEFAULT CURRENT_TIMESTAMP")

CRM_CUST_INFO: Columns = [
    ("cst_id", "INT"),
    ("cst_key", "VARCHAR(50)"),
    ("cst_firstname", "VARCHAR(50)"),
    ("cst_lastname", "VARCHAR(50)"),
    ("cst_marital_status", "VARCHAR(50)"),
    ("cst_gndr", "VARCHAR(50)"),
    ("cst_create_date", "DATE"),
]

CRM_PRD_INFO: Columns = [
    ("prd_id", "INT"),
    ("cat_id", "VARCHAR(50)"),
    ("prd_key", "VARCHAR(50)"),
    ("prd_nm", "VARCHAR(50)"),
    ("prd_cost", "INT"),
    ("prd_line", "VARCHAR(50)"),
    ("prd_start_dt", "DATE"),
    ("prd_end_dt", "DATE"),
]

CRM_SALES_DETAILS: Columns = [
    ("sls_ord_num", "VARCHAR(50)"),
    ("sls_prd_key", "VARCHAR(50)"),
    ("sls_cust_id", "INT"),
    ("sls_order_dt", "DATE"),
    ("sls_ship_dt", "DATE"),
    ("sls_due_dt", "DATE"),
    ("sls_sales", "INT"),
    ("sls_quantity", "INT"),
    ("sls_price", "INT"),
]

ERP_CUST_AZ12: Columns = [
    ("cid", "VARCHAR(50)"),
    ("bdate", "DATE"),
    ("gen", "VARCHAR(50)"),
]

ERP_LOC_A101: Columns = [
    ("cid", "VARCHAR(50)"),
    ("cntry", "VARCHAR(50)"),
]

ERP_PX_CAT_G1V2: Columns = [
    ("id", "VARCHAR(50)"),
    ("cat", "VARCHAR(50)"),
    ("subcat", "VARCHAR(50)"),
    ("maintenance", "VARCHAR(50)"),
]


def column_names(columns: Columns) -> list[str]:
    """Names of the data columns, in output order."""
    return [name for name, _ in columns]
