"""Pooled statement gateway: single-use prepared statements over a shared connection pool."""

import threading
from typing import Optional

from .batch import BatchExecutor, BatchMode
from .configuration import DatabaseConfig, get_database_config
from .cursor import ResultCursor
from .errors import (
    AcquireError,
    BindError,
    ContractViolation,
    DatabaseFailure,
    ErrorKind,
    ExecutionError,
    GatewayError,
    IllegalStateError,
    ModeConflictError,
    PrepareError,
)
from .factory import GatewayFactory
from .gateway import Gateway, ReleasePolicy
from .params import Param, ParamBinder, SqlType
from .pool import ConnectionPool, PgConnectionPool
from .query import QueryExecutor
from .result import Result
from .statement import StatementHandle

_default_gateway: Optional[Gateway] = None
_default_lock = threading.Lock()


def init_gateway(config: Optional[DatabaseConfig] = None) -> Gateway:
    global _default_gateway
    if _default_gateway is not None:
        return _default_gateway

    with _default_lock:
        if _default_gateway is None:
            _default_gateway = GatewayFactory.from_config(config or get_database_config()).build()
    return _default_gateway


def get_gateway() -> Gateway:
    return init_gateway()


def open_query(sql: str) -> QueryExecutor:
    return get_gateway().open_query(sql)


def open_batch(sql: str) -> BatchExecutor:
    return get_gateway().open_batch(sql)


def close_gateway() -> None:
    global _default_gateway
    with _default_lock:
        if _default_gateway is not None:
            _default_gateway.close()
            _default_gateway = None


def get_pool_stats() -> dict:
    if _default_gateway is None:
        return {"status": "not_initialized"}
    return _default_gateway.get_pool_stats()


__all__ = [
    "init_gateway",
    "get_gateway",
    "open_query",
    "open_batch",
    "close_gateway",
    "get_pool_stats",
    "AcquireError",
    "BatchExecutor",
    "BatchMode",
    "BindError",
    "ConnectionPool",
    "ContractViolation",
    "DatabaseConfig",
    "DatabaseFailure",
    "ErrorKind",
    "ExecutionError",
    "Gateway",
    "GatewayError",
    "GatewayFactory",
    "IllegalStateError",
    "ModeConflictError",
    "Param",
    "ParamBinder",
    "PgConnectionPool",
    "PrepareError",
    "QueryExecutor",
    "ReleasePolicy",
    "Result",
    "ResultCursor",
    "SqlType",
    "StatementHandle",
]
