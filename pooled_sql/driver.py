"""Prepared-statement emulation on top of a psycopg2 cursor.

psycopg2 has no client-side prepared statement object, so one is assembled
here: positional bindings are collected per row, staged rows are kept for a
batch run, and the cursor does the actual work.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from psycopg2 import ProgrammingError
from psycopg2.extensions import ISQLQuote, adapt
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor

from .params import TypeHint, type_name

# Raised by psycopg2 while merging parameters into the query text client-side
_FORMAT_ERRORS = (IndexError, TypeError, ValueError, UnicodeError)


class ParameterMismatch(ProgrammingError):
    """Bound values do not fit the placeholders of the query."""


class TypedParameter:
    """Adapter rendering a bound value with an explicit cast, ``value::type``.

    The type name is passed through untouched; it must come from code, never
    from user input.
    """

    def __init__(self, value: Any, sql_type: str):
        self.value = value
        self.sql_type = sql_type
        self._conn: Optional[PgConnection] = None

    def __conform__(self, proto):
        if proto is ISQLQuote:
            return self
        return None

    def prepare(self, conn: PgConnection) -> None:
        self._conn = conn

    def getquoted(self) -> bytes:
        adapted = adapt(self.value)
        if self._conn is not None and hasattr(adapted, "prepare"):
            adapted.prepare(self._conn)
        return adapted.getquoted() + b"::" + self.sql_type.encode("ascii")

    def __eq__(self, other) -> bool:
        if not isinstance(other, TypedParameter):
            return NotImplemented
        return self.value == other.value and self.sql_type == other.sql_type

    def __repr__(self) -> str:
        return f"TypedParameter({self.value!r}, {self.sql_type!r})"


class PreparedStatement:
    """One query text bound to one cursor of one connection."""

    def __init__(self, connection: PgConnection, query: str):
        self.query = query
        self._cursor: PgCursor = connection.cursor()
        self._bound: Dict[int, Any] = {}
        self._batch: List[Optional[Tuple[Any, ...]]] = []

    @property
    def cursor(self) -> PgCursor:
        return self._cursor

    @property
    def staged_rows(self) -> int:
        return len(self._batch)

    def bind(self, position: int, value: Any, type_hint: Optional[TypeHint] = None) -> None:
        if position < 1:
            raise ProgrammingError(f"bind position must be 1-based, got {position}")

        # adapt() raises ProgrammingError for values psycopg2 has no adapter for
        adapt(value)

        sql_type = type_name(type_hint)
        self._bound[position] = value if sql_type is None else TypedParameter(value, sql_type)

    def clear(self) -> None:
        self._bound.clear()

    def _current_params(self) -> Optional[Tuple[Any, ...]]:
        if not self._bound:
            return None

        count = max(self._bound)
        missing = [pos for pos in range(1, count + 1) if pos not in self._bound]
        if missing:
            raise ParameterMismatch(f"no value bound for position(s) {missing}")

        return tuple(self._bound[pos] for pos in range(1, count + 1))

    def add_batch(self) -> None:
        self._batch.append(self._current_params())
        self.clear()

    def _execute(self, params: Optional[Tuple[Any, ...]]) -> None:
        try:
            self._cursor.execute(self.query, params)
        except _FORMAT_ERRORS as exc:
            raise ParameterMismatch(f"{type(exc).__name__}: {exc}") from exc

    def execute_update(self) -> int:
        self._execute(self._current_params())
        return self._cursor.rowcount

    def execute_query(self) -> PgCursor:
        self._execute(self._current_params())
        return self._cursor

    def execute_batch(self) -> List[int]:
        counts: List[int] = []
        for params in self._batch:
            self._execute(params)
            counts.append(self._cursor.rowcount)
        self._batch.clear()
        return counts

    def close(self) -> None:
        if not self._cursor.closed:
            self._cursor.close()
