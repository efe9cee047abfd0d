"""Pool-facing façade: the only code that acquires, returns or evicts connections."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Union

import psycopg2

from .batch import BatchExecutor
from .diagnostics import truncate_sql
from .driver import PreparedStatement
from .errors import AcquireError, PrepareError
from .logger import get_logger
from .pool import ConnectionPool
from .query import QueryExecutor
from .statement import StatementHandle

log = get_logger(__name__)


class ReleasePolicy(str, Enum):
    """What happens to a connection when its statement closes cleanly.

    A statement that failed always evicts its connection.
    """

    EVICT_ALWAYS = "evict_always"
    RETURN_ON_CLEAN = "return_on_clean"

    @classmethod
    def from_raw(cls, raw: Union["ReleasePolicy", str, None]) -> "ReleasePolicy":
        if raw is None:
            return cls.EVICT_ALWAYS
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown release policy {raw!r}; expected one of: {allowed}") from exc


class Gateway:
    def __init__(
        self,
        pool: ConnectionPool,
        release_policy: Union[ReleasePolicy, str, None] = ReleasePolicy.EVICT_ALWAYS,
        owns_pool: bool = True,
    ):
        if pool is None:
            raise ValueError("pool cannot be None")
        self._pool = pool
        self._release_policy = ReleasePolicy.from_raw(release_policy)
        self._owns_pool = owns_pool

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def release_policy(self) -> ReleasePolicy:
        return self._release_policy

    def open_query(self, query: str) -> QueryExecutor:
        return QueryExecutor(query, self)

    def open_batch(self, query: str) -> BatchExecutor:
        return BatchExecutor(query, self)

    def open_single_statement(self, query: str) -> StatementHandle:
        return self._open_statement(query, autocommit=True)

    def open_batch_statement(self, query: str) -> StatementHandle:
        return self._open_statement(query, autocommit=False)

    def _acquire(self) -> Any:
        try:
            return self._pool.acquire()
        except Exception as exc:
            log.error("DB_CONNECTION_RETRIEVE_FAILED|error=%s", exc, exc_info=True)
            raise AcquireError("Failed to acquire database connection", exc) from exc

    def _open_statement(self, query: str, autocommit: bool) -> StatementHandle:
        connection = self._acquire()

        try:
            connection.autocommit = autocommit
            prepared = PreparedStatement(connection, query)
        except Exception as exc:
            log.error(
                "DB_STATEMENT_PREPARE_FAILED|sql=%s|autocommit=%s|error=%s",
                truncate_sql(query),
                autocommit,
                exc,
            )
            self.release(connection, failed=True)
            if isinstance(exc, psycopg2.Error):
                raise PrepareError("Failed to prepare statement", exc) from exc
            raise

        log.debug("DB_STATEMENT_OPENED|autocommit=%s|sql=%s", autocommit, truncate_sql(query))
        return StatementHandle(self, connection, prepared)

    def release(self, connection: Any, failed: bool = False) -> None:
        """Return ``connection`` to the pool, or evict it.

        Pool errors are logged and never raised, so cleanup paths stay quiet.
        """
        if connection is None:
            return

        evict = failed or self._release_policy is ReleasePolicy.EVICT_ALWAYS
        try:
            if evict:
                self._pool.evict(connection)
            else:
                self._pool.release(connection)
        except Exception as exc:
            log.error(
                "DB_CONNECTION_RELEASE_FAILED|evict=%s|error=%s", evict, exc, exc_info=True
            )
            return

        if failed:
            log.warning("DB_CONNECTION_EVICTED|reason=failure")
        else:
            log.debug("DB_CONNECTION_RELEASED|evicted=%s", evict)

    def get_pool_stats(self) -> Dict[str, Any]:
        stats_fn = getattr(self._pool, "get_pool_stats", None)
        stats: Dict[str, Any] = stats_fn() if callable(stats_fn) else {"status": "unknown"}
        stats["release_policy"] = self._release_policy.value
        return stats

    def close(self) -> None:
        if not self._owns_pool:
            return
        self._pool.close_all()

    def __enter__(self) -> "Gateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Gateway(pool={type(self._pool).__name__}, release_policy={self._release_policy.value})"

