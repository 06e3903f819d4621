"""Storage layer: engine and session management plus repositories."""

from blog_aggregator.storage.database import (
    DatabaseManager,
    create_engine_from_config,
    init_db,
    run_migrations,
)

__all__ = [
    "DatabaseManager",
    "create_engine_from_config",
    "init_db",
    "run_migrations",
]
