"""Single-use owner of one pooled connection and one prepared statement."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

import psycopg2

from .cursor import ResultCursor
from .driver import ParameterMismatch, PreparedStatement
from .errors import BindError, ExecutionError, IllegalStateError
from .logger import get_logger
from .params import ParamBinder

if TYPE_CHECKING:
    from .gateway import Gateway

log = get_logger(__name__)


class StatementHandle:
    """Owns ``connection`` and ``prepared`` until ``close()``.

    A handle runs exactly one execute cycle. ``close()`` hands the connection
    back to the gateway exactly once; a handle marked failed is always
    evicted, whatever the gateway's release policy.
    """

    def __init__(self, gateway: "Gateway", connection: Any, prepared: PreparedStatement):
        self._gateway = gateway
        self._connection = connection
        self._prepared = prepared
        self._closed = False
        self._failed = False
        self._executed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def query(self) -> str:
        return self._prepared.query

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise IllegalStateError(f"Cannot {operation} after the statement was closed")

    def _ensure_not_executed(self, operation: str) -> None:
        self._ensure_open(operation)
        if self._executed:
            raise IllegalStateError(f"Cannot {operation}: the statement was already executed")

    def mark_failed(self) -> None:
        self._failed = True

    def bind_row(self, binder: ParamBinder) -> None:
        self._ensure_not_executed("bind parameters")

        self._prepared.clear()
        position = 0
        try:
            for position, param in enumerate(binder.as_sequence(), start=1):
                self._prepared.bind(position, param.value, param.type_hint)
        except psycopg2.Error as exc:
            self._failed = True
            raise BindError(f"Failed to bind parameter at position {position}", exc) from exc

    def add_to_batch(self) -> None:
        self._ensure_not_executed("stage a batch row")
        try:
            self._prepared.add_batch()
        except psycopg2.Error as exc:
            self._failed = True
            raise BindError("Failed to stage batch row", exc) from exc

    def execute_update(self) -> int:
        self._ensure_not_executed("execute an update")
        self._executed = True
        try:
            return self._prepared.execute_update()
        except ParameterMismatch as exc:
            self._failed = True
            raise BindError("Bound values do not match the update placeholders", exc) from exc
        except psycopg2.Error as exc:
            self._failed = True
            raise ExecutionError("Update execution failed", exc) from exc

    def execute_query(self) -> ResultCursor:
        self._ensure_not_executed("execute a query")
        self._executed = True
        try:
            raw_cursor = self._prepared.execute_query()
        except ParameterMismatch as exc:
            self._failed = True
            raise BindError("Bound values do not match the query placeholders", exc) from exc
        except psycopg2.Error as exc:
            self._failed = True
            raise ExecutionError("Query execution failed", exc) from exc

        return ResultCursor(self, raw_cursor)

    def execute_batch(self) -> List[int]:
        self._ensure_not_executed("execute a batch")
        self._executed = True
        try:
            return self._prepared.execute_batch()
        except ParameterMismatch as exc:
            self._failed = True
            raise BindError("Batch row does not match the statement placeholders", exc) from exc
        except psycopg2.Error as exc:
            self._failed = True
            raise ExecutionError("Batch execution failed", exc) from exc

    def commit(self) -> None:
        self._ensure_open("commit")
        try:
            self._connection.commit()
        except psycopg2.Error as exc:
            self._failed = True
            raise ExecutionError("Commit failed", exc) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        try:
            self._prepared.close()
        except psycopg2.Error as exc:
            self._failed = True
            log.warning("DB_STATEMENT_CLOSE_FAILED|error=%s", exc)
        finally:
            self._gateway.release(self._connection, failed=self._failed)

    def __enter__(self) -> "StatementHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._failed = True
        self.close()
