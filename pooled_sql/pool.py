import threading
from typing import Any, Dict, Optional, Protocol

from psycopg2 import InterfaceError, OperationalError
from psycopg2.extensions import connection as PgConnection
from psycopg2.pool import ThreadedConnectionPool

from .logger import get_logger

log = get_logger(__name__)


class ConnectionPool(Protocol):
    """Capability consumed by the gateway; nothing else talks to the pool."""

    def acquire(self) -> Any:
        ...

    def release(self, connection: Any) -> None:
        ...

    def evict(self, connection: Any) -> None:
        ...

    def close_all(self) -> None:
        ...


class PgConnectionPool:
    """Lazily created psycopg2 ``ThreadedConnectionPool``.

    ``acquire``, ``release`` and ``evict`` may be called from several threads;
    the psycopg2 pool serialises them with its own lock.
    """

    def __init__(self, min_conn: int = 1, max_conn: int = 10, **connect_kwargs: Any):
        if min_conn < 0 or max_conn < 1 or min_conn > max_conn:
            raise ValueError(f"invalid pool bounds min={min_conn} max={max_conn}")

        self.min_conn = min_conn
        self.max_conn = max_conn
        self._connect_kwargs = connect_kwargs
        self._pool: Optional[ThreadedConnectionPool] = None
        self._pool_details_logged = False
        self._pool_lock = threading.Lock()

    def init_pool(self) -> ThreadedConnectionPool:
        if self._pool:
            return self._pool

        with self._pool_lock:
            if self._pool:
                return self._pool

            try:
                self._pool = ThreadedConnectionPool(self.min_conn, self.max_conn, **self._connect_kwargs)
            except Exception as exc:
                self._pool = None
                log.error("DB_POOL_INIT_FAILED|error=%s", exc, exc_info=True)
                raise

        self._log_pool_details()
        log.info("DB_POOL_INITIALIZED|min=%d|max=%d", self.min_conn, self.max_conn)
        return self._pool

    def _log_pool_details(self) -> None:
        if self._pool_details_logged or not self._pool:
            return

        conn = None
        close_conn = False
        try:
            conn = self._pool.getconn()
            with conn.cursor() as cur:
                cur.execute("SELECT current_database(), current_schema();")
                db_name, schema = cur.fetchone()
                log.info("DB_POOL_READY|database=%s|schema=%s", db_name, schema)
                self._pool_details_logged = True
            conn.rollback()
        except (OperationalError, InterfaceError) as exc:
            close_conn = True
            log.error("DB_METADATA_QUERY_FAILED|error=%s", exc, exc_info=True)
        except Exception as exc:
            log.error("DB_METADATA_QUERY_FAILED|error=%s", exc, exc_info=True)
        finally:
            if conn is not None and self._pool:
                self._pool.putconn(conn, close=close_conn)

    def acquire(self) -> PgConnection:
        return self.init_pool().getconn()

    def release(self, connection: PgConnection) -> None:
        if not self._pool:
            connection.close()
            return
        self._pool.putconn(connection)

    def evict(self, connection: PgConnection) -> None:
        if not self._pool:
            connection.close()
            return
        self._pool.putconn(connection, close=True)

    def close_all(self) -> None:
        with self._pool_lock:
            if self._pool:
                try:
                    self._pool.closeall()
                    log.info("DB_POOL_CLOSED")
                except Exception as exc:
                    log.error("DB_POOL_CLOSE_FAILED|error=%s", exc, exc_info=True)
                finally:
                    self._pool = None
                    self._pool_details_logged = False

    def get_pool_stats(self) -> Dict[str, Any]:
        if not self._pool:
            return {"status": "not_initialized", "minconn": self.min_conn, "maxconn": self.max_conn}

        return {
            "status": "closed" if self._pool.closed else "active",
            "minconn": self._pool.minconn,
            "maxconn": self._pool.maxconn,
        }
