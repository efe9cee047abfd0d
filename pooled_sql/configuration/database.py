"""Database and pool configuration read from the environment."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional

from . import env  # noqa: F401  (loads .env on import)

DEFAULT_CONNECTION_TIMEOUT = 30
DEFAULT_POOL_MIN_CONN = 1
DEFAULT_POOL_MAX_CONN = 10
DEFAULT_RELEASE_POLICY = "evict_always"


@dataclass(frozen=True)
class DatabaseConfig:
    """Immutable container for connection and pool parameters.

    ``dsn`` and the discrete host parameters are alternatives; when ``dsn`` is
    set it wins and the host fields are ignored.
    """

    dbname: str
    user: str
    password: Optional[str]
    host: str
    port: str
    options: Optional[str]
    dsn: Optional[str] = None
    connect_timeout: int = DEFAULT_CONNECTION_TIMEOUT
    min_conn: int = DEFAULT_POOL_MIN_CONN
    max_conn: int = DEFAULT_POOL_MAX_CONN
    release_policy: str = DEFAULT_RELEASE_POLICY
    extra: Dict[str, str] = field(default_factory=dict)


def _int_env(name: str, default: int) -> int:
    from os import getenv

    raw = getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _mapping_env(name: str) -> Dict[str, str]:
    """Parse ``key=value,key=value`` into extra libpq connection keywords."""
    from os import getenv

    raw = getenv(name) or ""
    extra: Dict[str, str] = {}
    for item in raw.split(","):
        if not item.strip():
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"{name} entries must look like key=value, got {item.strip()!r}")
        extra[key.strip()] = value.strip()
    return extra


@lru_cache(maxsize=1)
def get_database_config() -> DatabaseConfig:
    """Return database configuration from the current environment."""

    from os import getenv

    return DatabaseConfig(
        dbname=getenv("DB_NAME", "postgres"),
        user=getenv("DB_USER", "postgres"),
        password=getenv("DB_PASSWORD"),  # unset means libpq falls back to .pgpass or PGPASSWORD
        host=getenv("DB_HOST", "localhost"),
        port=getenv("DB_PORT", "5432"),
        options=getenv("DB_OPTIONS") or None,
        dsn=getenv("DB_DSN") or None,
        connect_timeout=_int_env("DB_CONNECTION_TIMEOUT", DEFAULT_CONNECTION_TIMEOUT),
        min_conn=_int_env("DB_POOL_MIN_CONN", DEFAULT_POOL_MIN_CONN),
        max_conn=_int_env("DB_POOL_MAX_CONN", DEFAULT_POOL_MAX_CONN),
        release_policy=getenv("DB_RELEASE_POLICY", DEFAULT_RELEASE_POLICY).strip().lower(),
        extra=_mapping_env("DB_EXTRA"),
    )
