"""
Integration tests for warehouse schema creation.
"""

import pytest

from silver_etl.core.entities import DEFAULT_LOAD_ORDER, get_entity
from silver_etl.warehouse.schema_mgmt import SchemaManager, bronze_table_ddl, silver_table_ddl


def _columns(pool, schema, table):
    rows = pool.execute_query(
        """
        SELECT column_name, data_type
        FROM information_schema.columns
        WHERE table_schema = %s AND table_name = %s
        ORDER BY ordinal_position
        """,
        (schema, table),
    )
    return [(row["column_name"], row["data_type"]) for row in rows]


def _tables(pool, schema):
    rows = pool.execute_query(
        "SELECT table_name FROM information_schema.tables WHERE table_schema = %s",
        (schema,),
    )
    return {row["table_name"] for row in rows}


@pytest.mark.integration
def test_silver_schema_created(clean_db):
    SchemaManager(clean_db).ensure_silver_schema("silver")

    assert _tables(clean_db, "silver") == {*DEFAULT_LOAD_ORDER, "error_log"}


@pytest.mark.integration
def test_silver_table_layout(clean_db):
    SchemaManager(clean_db).ensure_silver_schema("silver", ["crm_prd_info"])

    columns = _columns(clean_db, "silver", "crm_prd_info")

    assert [name for name, _ in columns] == [
        *get_entity("crm_prd_info").silver_column_names, "dwh_create_date"
    ]
    assert dict(columns)["prd_end_dt"] == "date"
    assert dict(columns)["dwh_create_date"] == "timestamp without time zone"


@pytest.mark.integration
def test_bronze_table_layout(clean_db):
    SchemaManager(clean_db).ensure_bronze_schema("bronze", ["crm_sales_details"])

    columns = dict(_columns(clean_db, "bronze", "crm_sales_details"))

    assert columns["sls_order_dt"] == "integer"
    assert columns["sls_ord_num"] == "character varying"


@pytest.mark.integration
def test_schema_creation_is_idempotent(clean_db):
    manager = SchemaManager(clean_db)
    manager.ensure_silver_schema("silver")
    clean_db.execute_command("INSERT INTO silver.erp_loc_a101 (cid, cntry) VALUES ('AW1', 'Germany')")

    manager.ensure_silver_schema("silver")

    assert len(clean_db.execute_query("SELECT * FROM silver.erp_loc_a101")) == 1


@pytest.mark.integration
def test_ddl_renders_qualified_names(db_pool):
    with db_pool.get_connection() as conn:
        silver_sql = silver_table_ddl("silver", get_entity("erp_cust_az12")).as_string(conn)
        bronze_sql = bronze_table_ddl("bronze", get_entity("erp_cust_az12")).as_string(conn)

    assert silver_sql.startswith('CREATE TABLE IF NOT EXISTS "silver"."erp_cust_az12"')
    assert '"dwh_create_date" TIMESTAMP DEFAULT CURRENT_TIMESTAMP' in silver_sql
    assert '"bdate" DATE' in bronze_sql
