"""Positional bind parameters for one logical row."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional, Union

from .errors import IllegalStateError


class SqlType(str, Enum):
    """Common SQL type names usable as bind type hints.

    Plain strings are accepted too; the database decides whether a type name
    is legal.
    """

    INTEGER = "integer"
    BIGINT = "bigint"
    SMALLINT = "smallint"
    NUMERIC = "numeric"
    REAL = "real"
    DOUBLE = "double precision"
    BOOLEAN = "boolean"
    VARCHAR = "varchar"
    TEXT = "text"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    JSONB = "jsonb"
    BYTEA = "bytea"
    UUID = "uuid"


TypeHint = Union[SqlType, str]


def type_name(type_hint: Optional[TypeHint]) -> Optional[str]:
    if type_hint is None:
        return None
    if isinstance(type_hint, SqlType):
        return type_hint.value
    return str(type_hint)


@dataclass(frozen=True)
class Param:
    value: Any
    type_hint: Optional[TypeHint] = None


class ParamBinder:
    """Ordered bindings; insertion order is the 1-based bind position order."""

    def __init__(self, *values: Any):
        self._params: List[Param] = [Param(value) for value in values]
        self._frozen = False

    def _check_mutable(self) -> None:
        if self._frozen:
            raise IllegalStateError("ParamBinder cannot be modified after it was handed to an executor")

    def append(self, value: Any) -> "ParamBinder":
        self._check_mutable()
        self._params.append(Param(value))
        return self

    def append_typed(self, type_hint: TypeHint, value: Any) -> "ParamBinder":
        self._check_mutable()
        self._params.append(Param(value, type_hint))
        return self

    def extend(self, *values: Any) -> "ParamBinder":
        self._check_mutable()
        self._params.extend(Param(value) for value in values)
        return self

    def freeze(self) -> "ParamBinder":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def as_sequence(self) -> List[Param]:
        return list(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[Param]:
        return iter(list(self._params))

    def __repr__(self) -> str:
        return f"ParamBinder({self._params!r}, frozen={self._frozen})"
