"""Value-or-failure wrapper returned by every execute call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import DatabaseFailure, ErrorKind

_T = TypeVar("_T")


@dataclass(frozen=True)
class Result(Generic[_T]):
    """Either a value or the database failure that prevented it.

    Callers inspect ``ok`` (or ``failed``) before touching ``value``.
    """

    value: Optional[_T] = None
    error: Optional[DatabaseFailure] = None

    def __post_init__(self):
        if self.error is not None and self.value is not None:
            raise ValueError("Result cannot carry both a value and an error")

    @classmethod
    def success(cls, value: _T) -> "Result[_T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DatabaseFailure) -> "Result[_T]":
        if error is None:
            raise ValueError("failure requires an error")
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> _T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: _T) -> _T:
        return default if self.error is not None else self.value

    def __bool__(self) -> bool:
        return self.ok
