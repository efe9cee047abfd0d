"""Logging settings for the ``pooled_sql`` logger tree, read once at import."""
import os

ROOT_LOGGER_NAME = "pooled_sql"

# Package-scoped variables win over the generic LOG_LEVEL of the host process
LOG_LEVEL = (os.getenv("POOLED_SQL_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
LOG_FILE = os.getenv("POOLED_SQL_LOG_FILE") or None

# 2024-01-31 12:00:00 ERROR   pooled_sql.sql | DB_ERROR|context=...
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_MAX_BYTES = int(os.getenv("POOLED_SQL_LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("POOLED_SQL_LOG_BACKUPS", "5"))
