"""Database backends.

Every backend is a ``BaseDialect`` subclass registered under one or more
names; ``DatabaseConfig.resolved_type`` selects one.
"""

from blog_aggregator.storage.dialects.base import BaseDialect
from blog_aggregator.storage.dialects.postgresql import PostgreSQLDialect
from blog_aggregator.storage.dialects.sqlite import SQLiteDialect

_DIALECTS: dict[str, type[BaseDialect]] = {
    "sqlite": SQLiteDialect,
    "postgresql": PostgreSQLDialect,
    "postgres": PostgreSQLDialect,
}


def get_supported_dialects() -> list[str]:
    return sorted(_DIALECTS)


def get_dialect(name: str) -> BaseDialect:
    """Instantiate the backend registered as ``name`` (case-insensitive).

    Raises:
        ValueError: For an unknown backend
    """
    try:
        dialect_cls = _DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported database dialect: {name!r} "
            f"(choose from {', '.join(get_supported_dialects())})"
        ) from None
    return dialect_cls()


__all__ = [
    "BaseDialect",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
    "get_supported_dialects",
]
