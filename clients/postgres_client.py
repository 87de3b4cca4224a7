"""
PostgreSQL access for the complaint desk.

One psycopg2 ThreadedConnectionPool per database URL, shared by every
PostgresClient pointed at that URL. Each call borrows a connection, runs one
statement and commits before handing the connection back, so a write is
durable once the call returns. Any error rolls the connection back and
propagates unchanged.
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Tuple
from uuid import UUID

import psycopg2
import psycopg2.extras
import psycopg2.pool

logger = logging.getLogger(__name__)

Params = Tuple | Dict | None


def _adapt(value: Any) -> Any:
    """UUIDs and enums go over the wire as their string values."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return type(value)(_adapt(v) for v in value)
    if isinstance(value, dict):
        return {k: _adapt(v) for k, v in value.items()}
    return value


class PostgresClient:
    """
    Thin query helper returning rows as dicts.

    Usage:
        db = PostgresClient(database_url)
        rows = db.execute("SELECT * FROM complaints WHERE status = %s", (ComplaintStatus.SUBMITTED,))
        total = db.execute_scalar("SELECT COUNT(*) FROM complaints")
    """

    _pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str, min_connections: int = 2, max_connections: int = 20):
        self._database_url = database_url
        self._min_connections = min_connections
        self._max_connections = max_connections
        self._pool()

    def _pool(self) -> psycopg2.pool.ThreadedConnectionPool:
        with self._pools_lock:
            pool = self._pools.get(self._database_url)
            if pool is None:
                pool = psycopg2.pool.ThreadedConnectionPool(
                    minconn=self._min_connections,
                    maxconn=self._max_connections,
                    dsn=self._database_url,
                    connect_timeout=30,
                )
                # UUID columns come back as uuid.UUID
                psycopg2.extras.register_uuid()
                self._pools[self._database_url] = pool
                logger.info(f"Connection pool created ({self._min_connections}-{self._max_connections})")
            return pool

    @contextmanager
    def get_connection(self):
        """Borrow a pooled connection, rolling back if the block raises."""
        pool = self._pool()
        conn = pool.getconn()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            pool.putconn(conn)

    def _run(self, query: str, params: Params, as_dicts: bool = True) -> List[Any]:
        cursor_factory = psycopg2.extras.RealDictCursor if as_dicts else None
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=cursor_factory) as cur:
                cur.execute(query, _adapt(params))
                rows = cur.fetchall() if cur.description else []
            conn.commit()
        return [dict(row) for row in rows] if as_dicts else rows

    def execute(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """Run a statement; rows as dicts, [] when it returns nothing."""
        return self._run(query, params)

    def execute_single(self, query: str, params: Params = None) -> Dict[str, Any] | None:
        """First row or None."""
        rows = self._run(query, params)
        return rows[0] if rows else None

    def execute_scalar(self, query: str, params: Params = None) -> Any:
        """First column of the first row, or None."""
        rows = self._run(query, params, as_dicts=False)
        return rows[0][0] if rows else None

    def execute_returning(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """
        Run INSERT/UPDATE/DELETE ... RETURNING.

        Same as execute(); kept separate so writes read as writes at call sites.
        """
        return self._run(query, params)

    def apply_schema(self, path: str | Path) -> None:
        """Run a DDL file in one transaction."""
        sql = Path(path).read_text()
        self._run(sql, None)
        logger.info(f"Applied schema {Path(path).name}")

    def close(self) -> None:
        """Close this URL's pool. Other clients on the same URL lose it too."""
        with self._pools_lock:
            pool = self._pools.pop(self._database_url, None)
        if pool is not None:
            pool.closeall()
