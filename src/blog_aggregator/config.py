"""
Settings for the blog aggregator.

Each section is a pydantic-settings model with its own environment prefix,
so ``DB_PATH=...`` or ``SCHEDULER_BATCH_SIZE=20`` work without a config file.
A YAML file can supply the same sections; keys it leaves out still come from
the environment (and ``.env``).
"""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = "config/config.yaml"

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
SslMode = Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"]


class DatabaseConfig(BaseSettings):
    """Where the relational store lives.

    SQLite needs nothing but ``path`` (``DB_PATH``). For PostgreSQL either
    export ``DATABASE_URL`` or set ``DB_TYPE=postgresql`` together with the
    host / database / user / password fields.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_", env_file=".env", extra="ignore", populate_by_name=True
    )

    type: Literal["sqlite", "postgresql"] = Field(default="sqlite", description="Backend name")
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
        description="Full SQLAlchemy URL; wins over every field below",
    )

    path: str = Field(default="data/blog_aggregator.db", description="SQLite file, or :memory:")

    host: Optional[str] = Field(default=None, description="PostgreSQL host")
    port: Optional[int] = Field(default=None, ge=1, le=65535, description="PostgreSQL port")
    database: Optional[str] = Field(default=None, description="PostgreSQL database name")
    user: Optional[str] = Field(default=None, description="PostgreSQL role")
    password: Optional[str] = Field(default=None, description="PostgreSQL password")
    ssl_mode: Optional[SslMode] = Field(default=None, description="libpq sslmode")

    echo: bool = Field(default=False, description="Log every SQL statement")
    pool_size: int = Field(default=5, ge=1, le=100, description="Pooled connections kept open")
    max_overflow: int = Field(default=10, ge=0, description="Extra connections under load")
    migrations_dir: Optional[str] = Field(
        default=None,
        description="Alembic script directory; migrations/ of the source tree when unset",
    )

    @field_validator("type", mode="before")
    @classmethod
    def accept_postgres_alias(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return "postgresql" if v == "postgres" else v
        return v

    @field_validator("ssl_mode", mode="before")
    @classmethod
    def lowercase_ssl_mode(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @property
    def resolved_type(self) -> str:
        """Backend actually in use: a configured URL decides over ``type``."""
        if not self.url:
            return self.type
        if self.url.startswith(("postgres://", "postgresql")):
            return "postgresql"
        if self.url.startswith("sqlite"):
            return "sqlite"
        return self.type


class SchedulerConfig(BaseSettings):
    """Freshness scheduler settings."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    enabled: bool = Field(default=True, description="Start the scheduler with `serve`")
    timezone: str = Field(default="UTC", description="Timezone for APScheduler")

    interval_seconds: int = Field(default=60, ge=1, description="Pause between ticks")
    batch_size: int = Field(default=10, ge=1, le=1000, description="Feeds picked per tick")
    stale_after_seconds: int = Field(
        default=3600, ge=0, description="How long a fetched feed stays fresh"
    )
    max_workers: int = Field(default=1, ge=1, le=20, description="Feeds handled in parallel")


class LoggingConfig(BaseSettings):
    """Loguru sink settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: LogLevel = Field(default="INFO", description="Minimum level for every sink")
    format: str = Field(
        default=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        ),
        description="Loguru format string",
    )

    console_enabled: bool = Field(default=True, description="Write to stderr")

    file_enabled: bool = Field(default=True, description="Write to a rotating file")
    file_path: str = Field(default="logs/blog_aggregator.log", description="Rotating log file")
    rotation: str = Field(default="100 MB", description="Rotate when the file reaches this")
    retention: str = Field(default="30 days", description="Delete rotated files older than this")

    @field_validator("level", mode="before")
    @classmethod
    def uppercase_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class WebConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEB_", env_file=".env", extra="ignore", populate_by_name=True
    )

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "WEB_PORT"),
        description="Bind port",
    )
    debug: bool = Field(default=False, description="Flask debug mode")
    default_posts_limit: int = Field(
        default=10, ge=1, description="Posts returned by /v1/posts without ?limit"
    )


class Config(BaseSettings):
    """Root settings object holding one model per section."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BLOG_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Blog Aggregator", description="Shown in logs")
    version: str = Field(default="0.1.0", description="Reported version")
    debug: bool = Field(default=False, description="Flask debug mode for the whole app")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


_SECTIONS: dict[str, type[BaseSettings]] = {
    "database": DatabaseConfig,
    "scheduler": SchedulerConfig,
    "logging": LoggingConfig,
    "web": WebConfig,
}

_config: Optional[Config] = None


def get_config() -> Config:
    """Return the process-wide settings, building them from the environment once."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Install ``config`` as the process-wide settings (``None`` forgets them)."""
    global _config
    _config = config


def load_config_from_yaml(yaml_path: str) -> Config:
    """Build a Config from a YAML file.

    Top-level keys matching a section (``database``, ``scheduler``,
    ``logging``, ``web``) are passed to that section's model, which still reads
    its environment variables for anything the file omits.

    Args:
        yaml_path: YAML file to read

    Returns:
        New Config (the global one is left untouched)

    Raises:
        FileNotFoundError: If ``yaml_path`` does not exist
    """
    import yaml

    path = Path(yaml_path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    values = {
        key: _SECTIONS[key](**(value or {})) if key in _SECTIONS else value
        for key, value in raw.items()
    }
    return Config(**values)


def reload_config(yaml_path: Optional[str] = None) -> Config:
    """Rebuild the global settings from the environment and an optional YAML file."""
    path = Path(yaml_path or DEFAULT_CONFIG_PATH)
    config = load_config_from_yaml(str(path)) if path.is_file() else Config()
    set_config(config)
    return config
