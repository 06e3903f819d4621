"""
Freshness scheduler.

Uses APScheduler to run a periodic tick that selects a bounded batch of
stale feeds and marks them fetched.
"""

import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from blog_aggregator.config import get_config
from blog_aggregator.logger import get_logger
from blog_aggregator.models import FeedModel, utcnow
from blog_aggregator.storage.repositories import FeedRepository

logger = get_logger(__name__)

TICK_JOB_ID = "freshness_tick"

# Per-feed work done before a feed is marked fetched. Returning False (or
# raising) leaves the feed unmarked so it stays a candidate next tick.
IngestFunc = Callable[[FeedModel], bool]
Clock = Callable[[], datetime]


def noop_ingest(feed: FeedModel) -> bool:
    """Default ingest step: nothing to retrieve, always succeeds."""
    return True


@dataclass
class TickResult:
    """Outcome of one scheduler tick."""

    started_at: datetime
    selected: list[uuid.UUID] = field(default_factory=list)
    marked: list[uuid.UUID] = field(default_factory=list)
    failed: list[uuid.UUID] = field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class SchedulerStats:
    """Cumulative statistics for scheduler operations."""

    total_ticks: int = 0
    skipped_ticks: int = 0
    feeds_marked: int = 0
    feed_failures: int = 0
    last_tick_time: Optional[datetime] = None
    last_error: Optional[str] = None


class FreshnessScheduler:
    """Periodically marks the stalest feeds as fetched."""

    def __init__(
        self,
        db_manager,
        interval_seconds: Optional[int] = None,
        batch_size: Optional[int] = None,
        stale_after_seconds: Optional[int] = None,
        ingest: IngestFunc = noop_ingest,
        clock: Clock = utcnow,
        max_workers: Optional[int] = None,
    ):
        """Initialize the freshness scheduler.

        Args:
            db_manager: DatabaseManager shared with the web app
            interval_seconds: Seconds between ticks
            batch_size: Maximum feeds selected per tick
            stale_after_seconds: Age after which a fetched feed is due again
            ingest: Per-feed work run before marking
            clock: Source of "now" (naive UTC)
            max_workers: Feeds processed concurrently within a tick

        Note:
            Unset values come from ``SchedulerConfig``.
        """
        config = get_config().scheduler

        self.db_manager = db_manager
        self.interval_seconds = interval_seconds or config.interval_seconds
        self.batch_size = batch_size or config.batch_size
        self.stale_after_seconds = (
            config.stale_after_seconds if stale_after_seconds is None else stale_after_seconds
        )
        self.max_workers = max_workers or config.max_workers
        self.ingest = ingest
        self.clock = clock

        self.scheduler = BackgroundScheduler(timezone=config.timezone)
        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)

        self.stats = SchedulerStats()

    def start(self) -> None:
        """Start ticking every ``interval_seconds``."""
        if self.scheduler.running:
            logger.warning("Scheduler is already running")
            return

        self.scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=TICK_JOB_ID,
            name="Mark stale feeds fetched",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(
            f"Scheduler started: every {self.interval_seconds}s, "
            f"batch of {self.batch_size}, stale after {self.stale_after_seconds}s"
        )

    def stop(self, wait: bool = True) -> None:
        """Stop the scheduler.

        Args:
            wait: Whether to wait for a running tick to complete
        """
        if not self.scheduler.running:
            logger.warning("Scheduler is not running")
            return

        self.scheduler.shutdown(wait=wait)
        logger.info("Scheduler stopped")

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_stats(self) -> SchedulerStats:
        return self.stats

    def _select_batch(self, now: datetime) -> list[FeedModel]:
        stale_after = timedelta(seconds=self.stale_after_seconds)
        with self.db_manager.session() as session:
            feeds = FeedRepository(session).get_next_feeds_to_fetch(
                limit=self.batch_size, stale_after=stale_after, now=now
            )
            for feed in feeds:
                session.expunge(feed)
        return feeds

    def _process_feed(self, feed: FeedModel) -> bool:
        """Ingest one feed and mark it fetched.

        Returns:
            True if the feed was marked fetched
        """
        logger.info(f"Fetching feed: {feed.name} ({feed.url})")
        try:
            if not self.ingest(feed):
                logger.warning(f"Ingest reported failure for feed {feed.id}, not marking fetched")
                return False

            with self.db_manager.session() as session:
                if not FeedRepository(session).mark_fetched(feed.id, self.clock()):
                    logger.warning(f"Feed {feed.id} disappeared before it could be marked")
                    return False
            return True
        except Exception as e:
            logger.exception(f"Failed to process feed {feed.id}: {e}")
            return False

    def run_once(self) -> TickResult:
        """Run a single tick.

        Never raises: a failed batch selection skips the tick, a failed feed
        is logged and the rest of the batch continues.

        Returns:
            TickResult describing what happened
        """
        now = self.clock()
        result = TickResult(started_at=now)
        self.stats.total_ticks += 1
        self.stats.last_tick_time = now

        try:
            feeds = self._select_batch(now)
        except Exception as e:
            logger.exception(f"Failed to get next feeds to fetch: {e}")
            result.skipped = True
            result.error = str(e)
            self.stats.skipped_ticks += 1
            self.stats.last_error = str(e)
            return result

        if not feeds:
            logger.debug("No stale feeds to fetch")
            return result

        result.selected = [feed.id for feed in feeds]

        if self.max_workers > 1 and len(feeds) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(self._process_feed, feeds))
        else:
            outcomes = [self._process_feed(feed) for feed in feeds]

        for feed, ok in zip(feeds, outcomes):
            (result.marked if ok else result.failed).append(feed.id)

        self.stats.feeds_marked += len(result.marked)
        self.stats.feed_failures += len(result.failed)
        logger.info(
            f"Tick complete: {len(result.marked)} marked, {len(result.failed)} failed "
            f"of {len(result.selected)} selected"
        )
        return result

    def _on_job_error(self, event: JobExecutionEvent) -> None:
        # run_once catches everything; this only fires on bugs in the tick itself
        error_msg = f"{type(event.exception).__name__}: {event.exception}"
        self.stats.last_error = error_msg
        logger.error(f"Job {event.job_id} failed: {error_msg}")


def create_scheduler(db_manager, ingest: IngestFunc = noop_ingest) -> FreshnessScheduler:
    """Create a FreshnessScheduler configured from ``SchedulerConfig``."""
    config = get_config().scheduler
    return FreshnessScheduler(
        db_manager,
        interval_seconds=config.interval_seconds,
        batch_size=config.batch_size,
        stale_after_seconds=config.stale_after_seconds,
        max_workers=config.max_workers,
        ingest=ingest,
    )
