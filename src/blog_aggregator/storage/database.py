"""
Engine and session handling.

One ``DatabaseManager`` is built at startup and passed to the web app and to
the freshness scheduler; its engine's connection pool is the only resource
they share.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from blog_aggregator.config import get_config
from blog_aggregator.logger import get_logger
from blog_aggregator.models import Base
from blog_aggregator.storage.dialects import get_dialect

if TYPE_CHECKING:
    from blog_aggregator.config import DatabaseConfig

logger = get_logger(__name__)

# Source-tree locations; an installed package has neither and needs
# DatabaseConfig.migrations_dir to run migrations.
PROJECT_ROOT = Path(__file__).resolve().parents[3]
ALEMBIC_INI = PROJECT_ROOT / "alembic.ini"
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"


def create_engine_from_config(db_config: "DatabaseConfig") -> Engine:
    """Build an engine for whichever backend ``db_config`` points at.

    Raises:
        ValueError: The settings are incomplete for that backend
    """
    dialect = get_dialect(db_config.resolved_type)

    problems = dialect.validate_config(db_config)
    if problems:
        raise ValueError("; ".join(problems))

    engine = create_engine(dialect.build_url(db_config), **dialect.get_engine_kwargs(db_config))
    dialect.setup_engine_events(engine)
    logger.debug(f"Created {dialect.name} engine")
    return engine


class DatabaseManager:
    """Owns the engine and hands out transactional sessions.

    The engine is created lazily, so building a manager never touches the
    database.
    """

    def __init__(self, db_path: Optional[str] = None, db_config: Optional["DatabaseConfig"] = None):
        """
        Args:
            db_path: Shortcut for a SQLite file (or ":memory:")
            db_config: Full database settings; the global config when omitted
        """
        if db_path is not None:
            from blog_aggregator.config import DatabaseConfig

            db_config = DatabaseConfig(type="sqlite", path=db_path, url=None)

        self.db_config = db_config or get_config().database
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine_from_config(self.db_config)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        # Loaded objects stay readable after commit, the handlers serialize
        # them once the session is gone
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, autoflush=False, expire_on_commit=False
            )
        return self._session_factory

    def init_db(self, drop_all: bool = False) -> None:
        """Create the tables straight from the ORM metadata (tests, throwaway databases)."""
        if drop_all:
            logger.warning("Dropping every table")
            Base.metadata.drop_all(bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Open a session that commits when the block succeeds.

        Any exception rolls the transaction back and is re-raised.

        Example:
            >>> with db_manager.session() as session:
            ...     UserRepository(session).create(UserCreate(name="alice"))
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Dispose of the pool; a later call to ``engine`` starts a new one."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def run_migrations(db_config: Optional["DatabaseConfig"] = None, revision: str = "head") -> None:
    """Bring the schema up to ``revision`` with Alembic.

    Raises:
        FileNotFoundError: The migration scripts cannot be found
    """
    from alembic import command
    from alembic.config import Config as AlembicConfig

    db_config = db_config or get_config().database
    script_dir = Path(db_config.migrations_dir) if db_config.migrations_dir else MIGRATIONS_DIR
    if not (script_dir / "env.py").is_file():
        raise FileNotFoundError(
            f"No Alembic environment in {script_dir}; set DB_MIGRATIONS_DIR "
            "or run from a source checkout"
        )

    alembic_cfg = AlembicConfig(str(ALEMBIC_INI)) if ALEMBIC_INI.is_file() else AlembicConfig()
    alembic_cfg.set_main_option("script_location", str(script_dir))
    # migrations/env.py reads the target database from here
    alembic_cfg.attributes["db_config"] = db_config

    logger.info(f"Upgrading schema to {revision}")
    command.upgrade(alembic_cfg, revision)
    logger.info("Schema is up to date")


def init_db(
    db_config: Optional["DatabaseConfig"] = None,
    drop_all: bool = False,
    use_migrations: bool = True,
) -> None:
    """Prepare a database for the application.

    Args:
        db_config: Target database; the global config when omitted
        drop_all: Drop the tables (and Alembic's version table) first
        use_migrations: Run Alembic; ``False`` falls back to ``create_all()``
    """
    with DatabaseManager(db_config=db_config) as manager:
        if drop_all:
            logger.warning("Dropping every table")
            Base.metadata.drop_all(bind=manager.engine)
            with manager.engine.begin() as conn:
                conn.exec_driver_sql("DROP TABLE IF EXISTS alembic_version")

        if use_migrations:
            run_migrations(manager.db_config)
        else:
            logger.warning("Creating tables without Alembic; later migrations will not apply")
            manager.init_db()
