"""Multi-row batched updates."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from .diagnostics import log_sql_error, truncate_sql
from .errors import DatabaseFailure, IllegalStateError, ModeConflictError
from .logger import get_logger
from .params import ParamBinder, TypeHint
from .result import Result

if TYPE_CHECKING:
    from .gateway import Gateway

log = get_logger(__name__)


class BatchMode(Enum):
    EMPTY = "empty"
    LIST = "list"
    ACCUMULATE = "accumulate"
    FINALIZED = "finalized"


class BatchExecutor:
    """Collects rows for one statement and runs them as a single batch.

    Rows are supplied either whole (``add_row``/``add_typed_row``) or one value
    at a time (``add``/``add_typed`` closed by ``push_row``). The first call
    fixes the mode; mixing the two raises ``ModeConflictError``.

    The batch runs with auto-commit disabled and is committed once every row
    has executed. On failure nothing is committed and the connection is
    evicted.
    """

    def __init__(self, query: str, gateway: "Gateway"):
        if not query or not query.strip():
            raise ValueError("query cannot be empty")
        if gateway is None:
            raise ValueError("gateway cannot be None")

        self._query = query
        self._gateway = gateway
        self._rows: List[ParamBinder] = []
        self._pending: Optional[ParamBinder] = None
        self._mode = BatchMode.EMPTY

    @property
    def query(self) -> str:
        return self._query

    @property
    def mode(self) -> BatchMode:
        return self._mode

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def has_pending_row(self) -> bool:
        return self._pending is not None

    def _enter_mode(self, mode: BatchMode) -> None:
        if self._mode is BatchMode.FINALIZED:
            raise IllegalStateError("Cannot add rows after the batch was executed")
        if self._mode is BatchMode.EMPTY:
            self._mode = mode
            return
        if self._mode is not mode:
            if mode is BatchMode.LIST:
                raise ModeConflictError("Cannot switch from add() to add_row() on the same batch")
            raise ModeConflictError("Cannot switch from add_row() to add() on the same batch")

    # List mode

    def add_row(self, *values: Any) -> "BatchExecutor":
        self._enter_mode(BatchMode.LIST)
        self._rows.append(ParamBinder(*values).freeze())
        return self

    def add_typed_row(self, *pairs: Tuple[Optional[TypeHint], Any]) -> "BatchExecutor":
        """Add a row of ``(type_hint, value)`` pairs; a ``None`` hint lets the driver infer."""
        self._enter_mode(BatchMode.LIST)

        row = ParamBinder()
        for type_hint, value in pairs:
            if type_hint is None:
                row.append(value)
            else:
                row.append_typed(type_hint, value)
        self._rows.append(row.freeze())
        return self

    # Accumulate mode

    def add(self, value: Any) -> "BatchExecutor":
        self._enter_mode(BatchMode.ACCUMULATE)
        if self._pending is None:
            self._pending = ParamBinder()
        self._pending.append(value)
        return self

    def add_typed(self, type_hint: TypeHint, value: Any) -> "BatchExecutor":
        self._enter_mode(BatchMode.ACCUMULATE)
        if self._pending is None:
            self._pending = ParamBinder()
        self._pending.append_typed(type_hint, value)
        return self

    def push_row(self) -> "BatchExecutor":
        if self._mode is BatchMode.LIST:
            raise ModeConflictError("push_row() belongs to add(); rows given to add_row() are already complete")
        if self._mode is BatchMode.FINALIZED:
            raise IllegalStateError("Cannot add rows after the batch was executed")
        if self._pending is None:
            raise IllegalStateError("push_row() requires at least one add() since the last row")

        self._rows.append(self._pending.freeze())
        self._pending = None
        return self

    def execute_batch(self) -> Result[List[int]]:
        if self._mode is BatchMode.FINALIZED:
            raise IllegalStateError("Batch cannot be executed more than once")
        if self._pending is not None:
            raise IllegalStateError("add() requires push_row() before the batch is executed")

        self._mode = BatchMode.FINALIZED

        if not self._rows:
            log.debug("DB_EXECUTE_BATCH_EMPTY|sql=%s", truncate_sql(self._query))
            return Result.success([])

        log.debug("DB_EXECUTE_BATCH|rows=%d|sql=%s", len(self._rows), truncate_sql(self._query))

        try:
            with self._gateway.open_batch_statement(self._query) as handle:
                for row in self._rows:
                    handle.bind_row(row)
                    handle.add_to_batch()
                update_counts = handle.execute_batch()
                handle.commit()
        except DatabaseFailure as exc:
            log_sql_error("execute_batch", self._query, len(self._rows), exc)
            return Result.failure(exc)

        return Result.success(update_counts)
