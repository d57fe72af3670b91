"""Database connection handling."""
import logging
from contextlib import contextmanager
from typing import Optional

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from app.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Explicitly constructed handle around a psycopg2 connection pool.

    The handle is created once at startup and passed to the repositories that
    need it, so nothing in the progress core reaches for a module-level client.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._pool: Optional[pool.ThreadedConnectionPool] = None

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    def initialize(self, minconn: Optional[int] = None, maxconn: Optional[int] = None) -> None:
        """Initialize the database connection pool.

        Args:
            minconn: Minimum number of connections to maintain
            maxconn: Maximum number of connections allowed
        """
        if self._pool is not None:
            logger.warning("Connection pool already initialized")
            return

        minconn = minconn if minconn is not None else self._settings.db_pool_min
        maxconn = maxconn if maxconn is not None else self._settings.db_pool_max

        try:
            self._pool = pool.ThreadedConnectionPool(
                minconn,
                maxconn,
                cursor_factory=RealDictCursor,
                **self._settings.db_config
            )
            logger.info(f"Database connection pool initialized (min={minconn}, max={maxconn})")
        except psycopg2.Error as e:
            logger.error(f"Failed to initialize connection pool: {e}")
            raise

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database connection pool closed")

    @contextmanager
    def connection(self):
        """Context manager for database connections from the pool.

        If the pool is not initialized, falls back to creating a direct connection.
        """
        if self._pool is None:
            logger.warning("Connection pool not initialized, using direct connection")
            conn = None
            try:
                conn = psycopg2.connect(
                    cursor_factory=RealDictCursor,
                    **self._settings.db_config
                )
                yield conn
            except psycopg2.Error as e:
                logger.error(f"Database error: {e}")
                if conn:
                    conn.rollback()
                raise
            finally:
                if conn:
                    conn.close()
            return

        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
        except psycopg2.Error as e:
            logger.error(f"Database error: {e}")
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                self._pool.putconn(conn)

    def ping(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1")
            return True
        except psycopg2.Error:
            return False
