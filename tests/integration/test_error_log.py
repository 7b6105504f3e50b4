"""
Integration tests for the persisted error log.
"""

from datetime import datetime, timedelta, timezone

import pytest

from silver_etl.core.models import ErrorLogEntry
from silver_etl.warehouse.error_log import ErrorLogSink, insert_error_log, query_error_log
from silver_etl.warehouse.schema_mgmt import SchemaManager


@pytest.fixture
def silver_db(clean_db):
    SchemaManager(clean_db).ensure_silver_schema("silver", entities=[])
    return clean_db


@pytest.mark.integration
def test_insert_returns_generated_id(silver_db):
    first = insert_error_log(silver_db, ErrorLogEntry(entity_name="crm_prd_info", error_message="a"))
    second = insert_error_log(silver_db, ErrorLogEntry(entity_name="crm_prd_info", error_message="b"))

    assert second > first


@pytest.mark.integration
def test_sink_persists_entries(silver_db):
    sink = ErrorLogSink(silver_db, "silver")

    entry = sink.record("crm_sales_details", "ValueError: cannot cast sls_price")

    rows = silver_db.execute_query("SELECT * FROM silver.error_log")
    assert len(rows) == 1
    assert rows[0]["error_id"] == entry.error_id
    assert rows[0]["entity_name"] == "crm_sales_details"
    assert rows[0]["error_message"] == "ValueError: cannot cast sls_price"
    assert rows[0]["occurred_at"] is not None


@pytest.mark.integration
def test_sink_without_table_keeps_entry_in_memory(clean_db):
    """Missing error_log table is logged, not raised"""
    sink = ErrorLogSink(clean_db, "silver")

    entry = sink.record("crm_cust_info", "boom")

    assert entry.error_id is None
    assert sink.entries == [entry]


@pytest.mark.integration
def test_query_filters_and_order(silver_db):
    now = datetime.now(timezone.utc)
    for offset, entity in [(3, "crm_cust_info"), (2, "crm_prd_info"), (1, "crm_cust_info")]:
        insert_error_log(
            silver_db,
            ErrorLogEntry(
                entity_name=entity,
                error_message=f"failure {offset}",
                occurred_at=now - timedelta(hours=offset),
            ),
        )

    everything = query_error_log(silver_db)
    customers = query_error_log(silver_db, entity_name="crm_cust_info")
    recent = query_error_log(silver_db, since=now - timedelta(hours=2, minutes=30))
    limited = query_error_log(silver_db, limit=1)

    assert [e.error_message for e in everything] == ["failure 1", "failure 2", "failure 3"]
    assert [e.error_message for e in customers] == ["failure 1", "failure 3"]
    assert [e.error_message for e in recent] == ["failure 1", "failure 2"]
    assert len(limited) == 1
    assert all(isinstance(e, ErrorLogEntry) for e in everything)


@pytest.mark.integration
def test_log_is_append_only_across_sinks(silver_db):
    ErrorLogSink(silver_db).record("crm_cust_info", "first run")
    ErrorLogSink(silver_db).record("crm_cust_info", "second run")

    assert len(query_error_log(silver_db, entity_name="crm_cust_info")) == 2
