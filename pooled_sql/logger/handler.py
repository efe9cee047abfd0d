import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional

from .config import (
    DATE_FORMAT,
    LOG_BACKUP_COUNT,
    LOG_FILE,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_BYTES,
    ROOT_LOGGER_NAME,
)


class GatewayLogger:
    _instance: Optional["GatewayLogger"] = None
    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(GatewayLogger, cls).__new__(cls)
        return cls._instance

    @staticmethod
    def _resolve_level(name: str) -> int:
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    def _initialize_package_logger(self) -> None:
        with self._lock:
            if self._initialized:
                return

            package_logger = logging.getLogger(ROOT_LOGGER_NAME)
            package_logger.setLevel(self._resolve_level(LOG_LEVEL))

            # Leave the host application's handlers alone when it configured logging itself
            if not package_logger.handlers and not logging.getLogger().handlers:
                console_handler = logging.StreamHandler(sys.stdout)
                console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
                package_logger.addHandler(console_handler)

            if LOG_FILE:
                try:
                    log_dir = os.path.dirname(LOG_FILE)
                    if log_dir:
                        os.makedirs(log_dir, exist_ok=True)

                    file_handler = RotatingFileHandler(
                        LOG_FILE,
                        maxBytes=LOG_MAX_BYTES,
                        backupCount=LOG_BACKUP_COUNT,
                        encoding="utf-8",
                    )
                    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
                    package_logger.addHandler(file_handler)
                except OSError as e:
                    package_logger.warning("LOG_FILE_UNAVAILABLE|path=%s|error=%s", LOG_FILE, e)

            self._initialized = True

    def get_logger(self, name: str) -> logging.Logger:
        if not self._initialized:
            self._initialize_package_logger()

        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)

        return self._loggers[name]


_registry = GatewayLogger()


def get_logger(name: str) -> logging.Logger:
    return _registry.get_logger(name)
