"""Open result set tied to the statement handle that produced it."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, List, Optional

import psycopg2
from psycopg2.extensions import cursor as PgCursor

from .errors import ExecutionError, IllegalStateError

if TYPE_CHECKING:
    from .statement import StatementHandle


class ResultCursor:
    """Rows of one query; closing the cursor releases its connection."""

    def __init__(self, handle: "StatementHandle", cursor: PgCursor):
        self._handle = handle
        self._cursor = cursor

    @property
    def closed(self) -> bool:
        return self._handle.closed

    @property
    def columns(self) -> List[str]:
        self._ensure_open()
        description = self._cursor.description or ()
        return [column[0] for column in description]

    @property
    def rowcount(self) -> int:
        self._ensure_open()
        return self._cursor.rowcount

    def _ensure_open(self) -> None:
        if self._handle.closed:
            raise IllegalStateError("Cannot read from a closed result cursor")

    def _fetch(self, operation, *args) -> Any:
        self._ensure_open()
        try:
            return operation(*args)
        except psycopg2.Error as exc:
            self._handle.mark_failed()
            raise ExecutionError("Fetching rows failed", exc) from exc

    def fetchone(self) -> Optional[Any]:
        return self._fetch(self._cursor.fetchone)

    def fetchmany(self, size: Optional[int] = None) -> List[Any]:
        if size is None:
            return self._fetch(self._cursor.fetchmany)
        return self._fetch(self._cursor.fetchmany, size)

    def fetchall(self) -> List[Any]:
        rows = self._fetch(self._cursor.fetchall)
        return rows if rows is not None else []

    def __iter__(self) -> Iterator[Any]:
        while True:
            row = self.fetchone()
            if row is None:
                return
            yield row

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._handle.mark_failed()
        self.close()
