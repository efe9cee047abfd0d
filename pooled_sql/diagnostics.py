from typing import Optional

from .logger import get_logger

log = get_logger("pooled_sql.sql")

SQL_LOG_LIMIT = 150


def truncate_sql(sql: str, limit: int = SQL_LOG_LIMIT) -> str:
    sql = " ".join(sql.split())
    return sql if len(sql) <= limit else f"{sql[:limit]}...(truncated)"


def log_sql_error(context: str, sql: str, param_count: Optional[int], exc: Exception) -> None:
    log.error(
        "DB_ERROR|context=%s|sql=%s|params=%s|kind=%s|error=%s",
        context,
        truncate_sql(sql),
        param_count,
        getattr(getattr(exc, "kind", None), "value", type(exc).__name__),
        exc,
        exc_info=True,
    )
