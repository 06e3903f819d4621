"""SQLite backend: the default for local runs and the test suite."""

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import Engine, event
from sqlalchemy.pool import QueuePool, StaticPool

from blog_aggregator.storage.dialects.base import BaseDialect

if TYPE_CHECKING:
    from blog_aggregator.config import DatabaseConfig

MEMORY_PATH = ":memory:"


def _is_memory(config: "DatabaseConfig") -> bool:
    return config.path == MEMORY_PATH or (config.url or "").rstrip("/").endswith(MEMORY_PATH)


class SQLiteDialect(BaseDialect):
    """SQLite, with foreign keys switched on for every connection.

    Without the pragma SQLite ignores ``ON DELETE CASCADE`` and the
    feed / follow / post clean-up would differ from PostgreSQL.
    """

    @property
    def name(self) -> str:
        return "sqlite"

    def build_url(self, config: "DatabaseConfig") -> str:
        """Turn ``url`` or ``path`` into a ``sqlite://`` URL.

        The parent directory of a file path is created if missing.

        Examples:
            >>> "data/blog_aggregator.db" -> "sqlite:///data/blog_aggregator.db"
            >>> ":memory:" -> "sqlite:///:memory:"
        """
        if config.url:
            return config.url
        if config.path.startswith("sqlite://"):
            return config.path
        if config.path != MEMORY_PATH:
            Path(config.path).parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{config.path}"

    def get_engine_kwargs(self, config: "DatabaseConfig") -> dict:
        # Request threads and the scheduler thread share connections
        connect_args = {"check_same_thread": False, "timeout": 30}

        if _is_memory(config):
            # One connection is the whole in-memory database
            return {"echo": config.echo, "connect_args": connect_args, "poolclass": StaticPool}

        return {
            "echo": config.echo,
            "connect_args": connect_args,
            "poolclass": QueuePool,
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
        }

    def setup_engine_events(self, engine: Engine) -> None:
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute("PRAGMA journal_mode=WAL")
            finally:
                cursor.close()

    def get_migration_kwargs(self) -> dict:
        # ALTER TABLE support is minimal, Alembic has to copy tables instead
        return {"render_as_batch": True}

    def validate_config(self, config: "DatabaseConfig") -> list[str]:
        if config.url or config.path == MEMORY_PATH:
            return []
        target = Path(config.path)
        if target.exists() and not target.is_file():
            return [f"SQLite path is not a regular file: {config.path}"]
        return []
