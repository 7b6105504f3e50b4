"""
Unit tests for the error-isolated entity loader.
"""

import pytest

from silver_etl.batch.loader import BatchLoader, describe_error
from silver_etl.core.exceptions import StoreUnavailableError
from silver_etl.warehouse.error_log import ErrorLogSink


@pytest.fixture
def raw_df(spark):
    return spark.createDataFrame([(1, "a"), (2, "b"), (3, "c")], "id INT, code STRING")


@pytest.fixture
def loader():
    return BatchLoader(ErrorLogSink())


class TestDescribeError:
    """Tests for error message formatting"""

    def test_type_and_message(self):
        assert describe_error(ValueError("bad value")) == "ValueError: bad value"

    def test_first_line_only(self):
        exc = RuntimeError("first line\n  stack detail\n  more")

        assert describe_error(exc) == "RuntimeError: first line"

    def test_empty_message(self):
        assert describe_error(KeyError()) == "KeyError"


class TestBatchLoader:
    """Tests for BatchLoader.load"""

    def test_successful_load(self, loader, raw_df, silver_store):
        result = loader.load("crm_cust_info", raw_df, lambda df: df, silver_store)

        assert result.succeeded
        assert result.rows_written == 3
        assert result.error_message is None
        assert result.ended_at >= result.started_at
        assert len(silver_store.tables["crm_cust_info"]) == 3
        assert loader.error_sink.entries == []

    def test_transform_applied_before_write(self, loader, raw_df, silver_store):
        result = loader.load(
            "crm_cust_info", raw_df, lambda df: df.filter("id > 1"), silver_store
        )

        assert result.rows_written == 2
        assert [row["id"] for row in silver_store.tables["crm_cust_info"]] == [2, 3]

    def test_lazy_raw_batch(self, loader, raw_df, silver_store):
        result = loader.load("crm_cust_info", lambda: raw_df, lambda df: df, silver_store)

        assert result.rows_written == 3

    def test_transform_failure_isolated(self, loader, raw_df, silver_store):
        def failing(df):
            raise ValueError("cannot parse column")

        result = loader.load("crm_prd_info", raw_df, failing, silver_store)

        assert not result.succeeded
        assert result.status == "failed"
        assert result.rows_written == 0
        assert result.error_message == "ValueError: cannot parse column"
        assert "crm_prd_info" not in silver_store.tables

        entries = loader.error_sink.entries
        assert len(entries) == 1
        assert entries[0].entity_name == "crm_prd_info"
        assert entries[0].error_message == "ValueError: cannot parse column"

    def test_read_failure_isolated(self, loader, silver_store):
        def missing():
            raise FileNotFoundError("cust_info.csv")

        result = loader.load("crm_cust_info", missing, lambda df: df, silver_store)

        assert not result.succeeded
        assert result.error_message.startswith("FileNotFoundError")
        assert len(loader.error_sink.entries) == 1

    def test_write_failure_isolated(self, loader, raw_df):
        def failing_write(entity_name, df):
            raise RuntimeError("constraint violated")

        result = loader.load("crm_cust_info", raw_df, lambda df: df, failing_write)

        assert not result.succeeded
        assert loader.error_sink.entries[0].error_message == "RuntimeError: constraint violated"

    def test_store_unavailable_propagates(self, loader, raw_df):
        def unreachable(entity_name, df):
            raise StoreUnavailableError("connection refused")

        with pytest.raises(StoreUnavailableError):
            loader.load("crm_cust_info", raw_df, lambda df: df, unreachable)

        assert loader.error_sink.entries == []

    def test_failure_leaves_previous_contents(self, loader, raw_df, silver_store):
        loader.load("crm_cust_info", raw_df, lambda df: df, silver_store)

        def failing(df):
            raise ValueError("boom")

        loader.load("crm_cust_info", raw_df, failing, silver_store)

        assert len(silver_store.tables["crm_cust_info"]) == 3
        assert silver_store.write_count["crm_cust_info"] == 1
