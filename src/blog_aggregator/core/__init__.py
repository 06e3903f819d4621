"""Core components: API key authentication and the freshness scheduler."""

from blog_aggregator.core.auth import AuthGate, db_user_lookup, require_api_key, resolve_user
from blog_aggregator.core.scheduler import (
    FreshnessScheduler,
    SchedulerStats,
    TickResult,
    create_scheduler,
    noop_ingest,
)

__all__ = [
    "AuthGate",
    "db_user_lookup",
    "require_api_key",
    "resolve_user",
    "FreshnessScheduler",
    "SchedulerStats",
    "TickResult",
    "create_scheduler",
    "noop_ingest",
]
