"""
Pytest configuration and fixtures for silver-etl tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from pathlib import Path
from typing import Generator

import pytest
from pyspark.sql import DataFrame, SparkSession

from silver_etl.batch.session import create_spark_session
from silver_etl.warehouse.connection import DatabaseConnectionPool


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session() -> Generator[SparkSession, None, None]:
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    spark = create_spark_session(
        app_name="silver-etl-test",
        master="local[2]",
        shuffle_partitions=2,
        **{
            "spark.driver.memory": "1g",
            "spark.ui.enabled": "false",
            "spark.sql.warehouse.dir": "/tmp/spark-warehouse",
        }
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


@pytest.fixture(scope="function")
def spark(spark_session) -> SparkSession:
    """
    Function-scoped Spark session that clears cached tables between tests
    """
    spark_session.catalog.clearCache()
    return spark_session


# =======================
# IN-MEMORY DESTINATION
# =======================

class InMemorySilverStore:
    """
    Test double for SilverTableWriter: keeps each entity's last batch as a
    list of dicts and counts writes.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.write_count: dict[str, int] = {}

    def replace(self, entity_name: str, df: DataFrame) -> int:
        rows = [row.asDict() for row in df.collect()]
        self.tables[entity_name] = rows
        self.write_count[entity_name] = self.write_count.get(entity_name, 0) + 1
        return len(rows)

    def __call__(self, entity_name: str, df: DataFrame) -> int:
        return self.replace(entity_name, df)


@pytest.fixture
def silver_store() -> InMemorySilverStore:
    return InMemorySilverStore()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def bronze_dir(test_data_dir) -> Path:
    """Directory of raw CSV extracts used by reader and end-to-end tests"""
    return test_data_dir / "bronze"


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Skips dependent tests when Docker is not available.

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_pipeline",
        password="test_password",
        dbname="test_datawarehouse",
    )
    try:
        container.start()
    except Exception as e:  # Docker daemon missing or unreachable
        pytest.skip(f"PostgreSQL container unavailable: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="function")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open connection pool against the test container

    Yields:
        DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_datawarehouse",
        user="test_pipeline",
        password="test_password",
    )
    pool.open()

    yield pool

    pool.close()


@pytest.fixture(scope="function")
def clean_db(db_pool) -> DatabaseConnectionPool:
    """
    Provide a database without bronze or silver schemas

    Returns:
        Open DatabaseConnectionPool
    """
    db_pool.execute_command("DROP SCHEMA IF EXISTS silver CASCADE")
    db_pool.execute_command("DROP SCHEMA IF EXISTS bronze CASCADE")
    return db_pool


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """
    Run a test from an empty working directory with no DB_* variables
    """
    for name in ("DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def pytest_collection_modifyitems(config, items):
    """Tag tests under tests/unit with the unit marker"""
    unit_dir = os.path.join(os.path.dirname(__file__), "unit")
    for item in items:
        if str(item.fspath).startswith(unit_dir):
            item.add_marker(pytest.mark.unit)
