"""Single-row update and query execution."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .cursor import ResultCursor
from .diagnostics import log_sql_error, truncate_sql
from .errors import DatabaseFailure, IllegalStateError
from .logger import get_logger
from .params import ParamBinder, TypeHint
from .result import Result

if TYPE_CHECKING:
    from .gateway import Gateway

log = get_logger(__name__)


class QueryExecutor:
    """Runs one statement exactly once with one row of parameters.

    Parameters are added fluently::

        result = gateway.open_query(sql).set(1).set_typed(SqlType.TEXT, "CS").execute_update()

    Database failures come back as a failed ``Result``; reusing the executor
    raises ``IllegalStateError``.
    """

    def __init__(self, query: str, gateway: "Gateway"):
        if not query or not query.strip():
            raise ValueError("query cannot be empty")
        if gateway is None:
            raise ValueError("gateway cannot be None")

        self._query = query
        self._gateway = gateway
        self._binder = ParamBinder()
        self._executed = False

    @property
    def query(self) -> str:
        return self._query

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def params(self) -> ParamBinder:
        return self._binder

    def set(self, value: Any) -> "QueryExecutor":
        self._ensure_pending("set a parameter")
        self._binder.append(value)
        return self

    def set_typed(self, type_hint: TypeHint, value: Any) -> "QueryExecutor":
        self._ensure_pending("set a parameter")
        self._binder.append_typed(type_hint, value)
        return self

    def set_list(self, *values: Any) -> "QueryExecutor":
        self._ensure_pending("set parameters")
        self._binder.extend(*values)
        return self

    def _ensure_pending(self, operation: str) -> None:
        if self._executed:
            raise IllegalStateError(f"Cannot {operation}: the query was already executed")

    def _consume(self) -> None:
        self._ensure_pending("execute")
        self._executed = True
        self._binder.freeze()

    def _fail(self, context: str, exc: DatabaseFailure) -> Result:
        log_sql_error(context, self._query, len(self._binder), exc)
        return Result.failure(exc)

    def execute_update(self) -> Result[int]:
        self._consume()
        log.debug("DB_EXECUTE_UPDATE|sql=%s", truncate_sql(self._query))

        try:
            with self._gateway.open_single_statement(self._query) as handle:
                handle.bind_row(self._binder)
                update_count = handle.execute_update()
        except DatabaseFailure as exc:
            return self._fail("execute_update", exc)

        return Result.success(update_count)

    def execute_query(self) -> Result[ResultCursor]:
        """Run the query; on success the caller owns the returned cursor and must close it."""
        self._consume()
        log.debug("DB_EXECUTE_QUERY|sql=%s", truncate_sql(self._query))

        try:
            handle = self._gateway.open_single_statement(self._query)
        except DatabaseFailure as exc:
            return self._fail("execute_query", exc)

        try:
            handle.bind_row(self._binder)
            cursor = handle.execute_query()
        except DatabaseFailure as exc:
            handle.mark_failed()
            handle.close()
            return self._fail("execute_query", exc)
        except BaseException:
            handle.mark_failed()
            handle.close()
            raise

        return Result.success(cursor)
