"""Alembic migration environment for the blog aggregator.

The database comes from the application's pydantic configuration (or from a
``DatabaseConfig`` passed in by ``run_migrations``), and the dialect system
supplies URL and engine settings.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config

from alembic import context

from blog_aggregator.config import get_config
from blog_aggregator.models import Base
from blog_aggregator.storage.dialects import get_dialect

config = context.config

# Only configure logging when run from the alembic CLI
if config.config_file_name is not None and "db_config" not in config.attributes:
    fileConfig(config.config_file_name)

db_config = config.attributes.get("db_config") or get_config().database
dialect = get_dialect(db_config.resolved_type)
db_url = dialect.build_url(db_config)

config.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))

target_metadata = Base.metadata
migration_kwargs = dialect.get_migration_kwargs()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to stdout."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **migration_kwargs,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live connection."""
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = db_url

    engine_kwargs = dialect.get_engine_kwargs(db_config)
    engine_kwargs.pop("echo", None)  # Alembic has its own logging

    connectable = engine_from_config(configuration, prefix="sqlalchemy.", **engine_kwargs)
    dialect.setup_engine_events(connectable)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            **migration_kwargs,
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
