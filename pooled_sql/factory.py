"""Builder assembling a Gateway over a psycopg2 pool."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .configuration import DatabaseConfig
from .errors import ModeConflictError
from .gateway import Gateway, ReleasePolicy
from .logger import get_logger
from .pool import PgConnectionPool

log = get_logger(__name__)


class _Target(Enum):
    NONE = "none"
    DSN = "dsn"
    HOST = "host"


class GatewayFactory:
    """Collects connection settings; a DSN and discrete host settings are exclusive."""

    def __init__(
        self,
        user: Optional[str] = None,
        password: Optional[str] = None,
        min_conn: int = 1,
        max_conn: int = 10,
        connect_timeout: Optional[int] = None,
    ):
        self._connect_kwargs: Dict[str, Any] = {}
        if user is not None:
            self._connect_kwargs["user"] = user
        if password is not None:
            self._connect_kwargs["password"] = password
        if connect_timeout is not None:
            self._connect_kwargs["connect_timeout"] = connect_timeout

        self._min_conn = min_conn
        self._max_conn = max_conn
        self._release_policy = ReleasePolicy.EVICT_ALWAYS
        self._target = _Target.NONE

    def _set_target(self, target: _Target) -> None:
        if self._target not in (_Target.NONE, target):
            raise ModeConflictError("Cannot set both a DSN and host settings, only one choice is allowed.")
        self._target = target

    def with_dsn(self, dsn: str) -> "GatewayFactory":
        if not dsn:
            raise ValueError("dsn cannot be empty")
        self._set_target(_Target.DSN)
        self._connect_kwargs["dsn"] = dsn
        return self

    def with_host(self, host: str, port: Union[int, str], dbname: str) -> "GatewayFactory":
        self._set_target(_Target.HOST)
        self._connect_kwargs.update(host=host, port=str(port), dbname=dbname)
        return self

    def with_connection_properties(self, properties: Optional[Mapping[str, Any]]) -> "GatewayFactory":
        """Extra libpq keywords such as ``sslmode`` or ``application_name``."""
        if properties:
            self._connect_kwargs.update(properties)
        return self

    def with_release_policy(self, policy: Union[ReleasePolicy, str]) -> "GatewayFactory":
        self._release_policy = ReleasePolicy.from_raw(policy)
        return self

    def connection_kwargs(self) -> Dict[str, Any]:
        return dict(self._connect_kwargs)

    def build(self) -> Gateway:
        if self._target is _Target.NONE:
            raise ValueError("Either with_dsn() or with_host() must be called before build()")

        pool = PgConnectionPool(self._min_conn, self._max_conn, **self._connect_kwargs)
        log.info(
            "DB_GATEWAY_BUILT|target=%s|min=%d|max=%d|release_policy=%s",
            self._target.value,
            self._min_conn,
            self._max_conn,
            self._release_policy.value,
        )
        return Gateway(pool, release_policy=self._release_policy)

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "GatewayFactory":
        factory = cls(
            user=None if config.dsn else config.user,
            password=None if config.dsn else config.password,
            min_conn=config.min_conn,
            max_conn=config.max_conn,
            connect_timeout=config.connect_timeout,
        )
        if config.dsn:
            factory.with_dsn(config.dsn)
        else:
            factory.with_host(config.host, config.port, config.dbname)
            if config.options:
                factory.with_connection_properties({"options": config.options})
        factory.with_connection_properties(config.extra)
        factory.with_release_policy(config.release_policy)
        return factory
