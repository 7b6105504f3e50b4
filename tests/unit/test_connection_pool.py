"""
Unit tests for database connection pool

Settings resolution runs without a database; the pooled-connection tests
use the PostgreSQL testcontainer.
"""
import pytest

from silver_etl.core.exceptions import StoreUnavailableError
from silver_etl.warehouse.connection import DatabaseConnectionPool


def test_settings_from_environment(monkeypatch):
    """Unset arguments fall back to DB_* environment variables"""
    monkeypatch.setenv("DB_HOST", "warehouse")
    monkeypatch.setenv("DB_PORT", "6543")
    monkeypatch.setenv("DB_NAME", "dwh")
    monkeypatch.setenv("DB_USER", "etl")
    monkeypatch.setenv("DB_PASSWORD", "secret")

    pool = DatabaseConnectionPool()

    assert (pool.host, pool.port, pool.database, pool.user) == ("warehouse", 6543, "dwh", "etl")
    assert "password=secret" in pool.conninfo


def test_arguments_override_environment(monkeypatch):
    monkeypatch.setenv("DB_HOST", "warehouse")
    monkeypatch.setenv("DB_PASSWORD", "secret")

    pool = DatabaseConnectionPool(host="localhost", password="other")

    assert pool.host == "localhost"
    assert pool.password == "other"


def test_repr_hides_password(isolated_env):
    pool = DatabaseConnectionPool(host="db", user="etl", password="secret")

    assert repr(pool) == "DatabaseConnectionPool(etl@db:5432/datawarehouse)"
    assert "application_name=silver-etl" in pool.conninfo


def test_password_required(isolated_env):
    with pytest.raises(ValueError, match="password"):
        DatabaseConnectionPool()


def test_connection_before_open(monkeypatch):
    monkeypatch.setenv("DB_PASSWORD", "secret")
    pool = DatabaseConnectionPool()

    with pytest.raises(RuntimeError, match="not open"):
        with pool.get_connection():
            pass


def test_unreachable_database(isolated_env):
    """Exhausted retries surface as StoreUnavailableError"""
    pool = DatabaseConnectionPool(host="127.0.0.1", port=1, password="secret", timeout=1.0)

    with pytest.raises(StoreUnavailableError, match="after 2 attempts"):
        pool.open(max_retries=2, retry_delay=0.0)

    assert pool._pool is None


@pytest.mark.integration
def test_connection_pool_initialization(postgres_container):
    """Test that connection pool initializes correctly"""
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_datawarehouse",
        user="test_pipeline",
        password="test_password",
        min_size=1,
        max_size=3,
    )

    pool.open()

    assert pool._pool is not None
    assert pool._pool.max_size == 3

    pool.close()
    assert pool._pool is None


@pytest.mark.integration
def test_execute_query(db_pool):
    """Rows come back as dictionaries"""
    result = db_pool.execute_query("SELECT 42 as answer")

    assert result == [{"answer": 42}]


@pytest.mark.integration
def test_execute_command(db_pool):
    db_pool.execute_command("CREATE TEMP TABLE IF NOT EXISTS pool_check (id INT)")

    with db_pool.get_cursor() as cur:
        cur.execute("SELECT 1 AS ok")
        assert cur.fetchone()["ok"] == 1
