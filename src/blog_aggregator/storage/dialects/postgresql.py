"""PostgreSQL backend for deployments."""

from typing import TYPE_CHECKING

from sqlalchemy.pool import QueuePool

from blog_aggregator.storage.dialects.base import BaseDialect

if TYPE_CHECKING:
    from blog_aggregator.config import DatabaseConfig

DEFAULT_PORT = 5432
LEGACY_SCHEME = "postgres://"


class PostgreSQLDialect(BaseDialect):
    @property
    def name(self) -> str:
        return "postgresql"

    def build_url(self, config: "DatabaseConfig") -> str:
        """Use ``url`` when given (DATABASE_URL), otherwise assemble one.

        Hosting platforms still hand out ``postgres://`` URLs, which
        SQLAlchemy 2 refuses, so that scheme is rewritten.

        Examples:
            >>> "postgresql://app:secret@db:5433/blogator?sslmode=require"
            >>> "postgresql://app@localhost/blogator"
        """
        if config.url:
            if config.url.startswith(LEGACY_SCHEME):
                return "postgresql://" + config.url[len(LEGACY_SCHEME):]
            return config.url

        credentials = config.user or ""
        if config.user and config.password:
            credentials = f"{config.user}:{config.password}"

        netloc = config.host or "localhost"
        if config.port and config.port != DEFAULT_PORT:
            netloc = f"{netloc}:{config.port}"
        if credentials:
            netloc = f"{credentials}@{netloc}"

        query = f"?sslmode={config.ssl_mode}" if config.ssl_mode else ""
        return f"postgresql://{netloc}/{config.database}{query}"

    def get_engine_kwargs(self, config: "DatabaseConfig") -> dict:
        return {
            "echo": config.echo,
            "poolclass": QueuePool,
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
            "pool_pre_ping": True,  # drop connections the server closed
        }

    def validate_config(self, config: "DatabaseConfig") -> list[str]:
        if config.url:
            return []
        return [
            f"PostgreSQL needs '{field}' when no URL is configured"
            for field in ("database", "user")
            if not getattr(config, field)
        ]
