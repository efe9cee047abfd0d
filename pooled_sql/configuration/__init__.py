from .database import DatabaseConfig, get_database_config

__all__ = [
    "DatabaseConfig",
    "get_database_config",
]
