"""
PostgreSQL connection pool for the warehouse (bronze and silver schemas).

Built on psycopg3 and psycopg_pool. Every failure to reach the server is
reported as StoreUnavailableError so the pipeline can stop the run instead
of recording one failed load per entity.
"""
import os
import time
from contextlib import contextmanager
from typing import Iterator

from psycopg import Connection, Cursor, OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout

from silver_etl.core.exceptions import StoreUnavailableError
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

APPLICATION_NAME = "silver-etl"

# Environment variable -> (attribute, default)
ENV_SETTINGS = {
    "DB_HOST": ("host", "localhost"),
    "DB_PORT": ("port", "5432"),
    "DB_NAME": ("database", "datawarehouse"),
    "DB_USER": ("user", "pipeline"),
    "DB_PASSWORD": ("password", None),
}


# SQLSTATEs of a server that is going away or refusing sessions
SERVER_GONE_STATES = frozenset({"57P01", "57P02", "57P03"})


def is_connection_lost(error: OperationalError) -> bool:
    """
    True if ``error`` means the server can no longer be reached.

    Client-side failures carry no SQLSTATE; class 08 covers connection
    exceptions. Statement or lock timeouts are ordinary errors of the
    statement that hit them.
    """
    state = error.sqlstate
    return state is None or state.startswith("08") or state in SERVER_GONE_STATES


class DatabaseConnectionPool:
    """
    Pooled connections to the warehouse.

    Unset connection arguments fall back to the DB_* environment variables.
    The pool is small: a run uses one connection at a time, plus one for
    the error log.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 4,
        timeout: float = 30.0,
    ) -> None:
        given = {"host": host, "port": port, "database": database, "user": user, "password": password}
        for env_name, (attr, default) in ENV_SETTINGS.items():
            setattr(self, attr, given[attr] or os.getenv(env_name, default))
        self.port = int(self.port)

        if not self.password:
            raise ValueError(
                "Database password must be provided. "
                "Set DB_PASSWORD environment variable or pass to constructor."
            )

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=max(1, int(timeout)),
            application_name=APPLICATION_NAME,
        )

        self._pool: ConnectionPool | None = None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, retrying while the server is unreachable.

        Each attempt waits for ``min_size`` connections to be established.

        Raises:
            StoreUnavailableError: If every attempt fails
        """
        if self._pool is not None:
            return

        last_error = None
        for attempt in range(1, max_retries + 1):
            pool = ConnectionPool(
                conninfo=self.conninfo,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.timeout,
                kwargs={"row_factory": dict_row},
                open=False,
            )
            try:
                pool.open(wait=True, timeout=self.timeout)
            except OperationalError as e:
                pool.close()
                last_error = e
                logger.warning(f"Connection attempt {attempt}/{max_retries} to {self} failed: {e}")
                if attempt < max_retries:
                    time.sleep(retry_delay)
                continue

            self._pool = pool
            logger.debug(f"Connection pool open: {self}")
            return

        raise StoreUnavailableError(
            f"Failed to connect to database after {max_retries} attempts: {last_error}"
        ) from last_error

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """
        Borrow a connection (rows as dicts).

        The transaction is committed when the block exits normally and
        rolled back on error.

        Raises:
            RuntimeError: If pool is not open
            StoreUnavailableError: If no connection frees up within the timeout
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        try:
            with self._pool.connection() as conn:
                yield conn
        except PoolTimeout as e:
            raise StoreUnavailableError(
                f"No connection to {self} available within {self.timeout}s"
            ) from e

    @contextmanager
    def get_cursor(self) -> Iterator[Cursor]:
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                yield cur

    def execute_query(self, query, params: tuple | dict | None = None) -> list[dict]:
        """Run a SELECT (string or psycopg.sql.Composed) and return all rows."""
        with self.get_cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def execute_command(self, command, params: tuple | dict | None = None) -> int:
        """Run a statement in its own transaction; returns the affected row count."""
        with self.get_cursor() as cur:
            cur.execute(command, params)
            return cur.rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"DatabaseConnectionPool({self.user}@{self.host}:{self.port}/{self.database})"
