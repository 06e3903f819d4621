"""Interface every database backend implements."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sqlalchemy import Engine

if TYPE_CHECKING:
    from blog_aggregator.config import DatabaseConfig


class BaseDialect(ABC):
    """Translates ``DatabaseConfig`` into what SQLAlchemy and Alembic need.

    Subclasses must provide ``name``, ``build_url`` and ``get_engine_kwargs``;
    the remaining hooks default to doing nothing.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def build_url(self, config: "DatabaseConfig") -> str:
        """Connection URL for ``create_engine()``."""
        ...

    @abstractmethod
    def get_engine_kwargs(self, config: "DatabaseConfig") -> dict:
        """Pool and driver options for ``create_engine()``."""
        ...

    def setup_engine_events(self, engine: Engine) -> None:
        """Attach per-connection setup to a freshly created engine."""

    def get_migration_kwargs(self) -> dict:
        """Extra options for Alembic's ``context.configure()``."""
        return {}

    def validate_config(self, config: "DatabaseConfig") -> list[str]:
        """Return human-readable problems with ``config`` (empty when usable)."""
        return []
