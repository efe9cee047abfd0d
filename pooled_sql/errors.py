"""Error kinds raised or returned by the statement gateway.

Database-level failures (``DatabaseFailure`` subclasses) are wrapped into a
``Result`` by the executors. Contract violations (``ContractViolation``
subclasses) are raised straight to the caller.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    POOL_EXHAUSTED = "pool_exhausted"
    PREPARE_FAILED = "prepare_failed"
    BIND_FAILED = "bind_failed"
    EXECUTION_FAILED = "execution_failed"
    ILLEGAL_STATE = "illegal_state"
    MODE_CONFLICT = "mode_conflict"


class GatewayError(Exception):
    """Base class for every error produced by the gateway."""

    kind: ErrorKind = ErrorKind.EXECUTION_FAILED


class DatabaseFailure(GatewayError):
    """An environmental failure reported by the pool or the database driver."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def pgcode(self) -> Optional[str]:
        return getattr(self.cause, "pgcode", None)

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is None:
            return base
        return f"{base}: {type(self.cause).__name__}: {self.cause}".rstrip()


class AcquireError(DatabaseFailure):
    """Raised when no connection could be acquired from the pool."""

    kind = ErrorKind.POOL_EXHAUSTED


class PrepareError(DatabaseFailure):
    """Raised when a statement could not be prepared on its connection."""

    kind = ErrorKind.PREPARE_FAILED


class BindError(DatabaseFailure):
    """Raised when a parameter could not be bound to its position."""

    kind = ErrorKind.BIND_FAILED


class ExecutionError(DatabaseFailure):
    """Raised when the database rejects the statement at run time."""

    kind = ErrorKind.EXECUTION_FAILED


class ContractViolation(GatewayError):
    """A programmer error; never wrapped into a result."""


class IllegalStateError(ContractViolation):
    """Raised when a single-use object is used after it was consumed."""

    kind = ErrorKind.ILLEGAL_STATE


class ModeConflictError(ContractViolation):
    """Raised when two mutually exclusive construction modes are mixed."""

    kind = ErrorKind.MODE_CONFLICT
