"""
Feed repository for database operations.
"""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import asc, or_
from sqlalchemy.orm import Session

from blog_aggregator.models import FeedCreate, FeedModel, utcnow
from blog_aggregator.storage.repositories.base import BaseRepository


class FeedRepository(BaseRepository[FeedModel, FeedCreate]):
    """Repository for Feed operations, including freshness bookkeeping."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, FeedModel)

    def create(self, obj_in: FeedCreate, user_id: Optional[uuid.UUID] = None) -> FeedModel:
        """Create a feed owned by a user.

        Args:
            obj_in: Feed data
            user_id: Owning user ID

        Returns:
            Created FeedModel instance
        """
        return super().create(obj_in, user_id=user_id)

    def get_by_url(self, url: str) -> Optional[FeedModel]:
        return self.session.query(FeedModel).filter(FeedModel.url == url).first()

    def list_by_user(self, user_id: uuid.UUID) -> list[FeedModel]:
        """List the feeds a user created."""
        return self.list(user_id=user_id)

    def get_next_feeds_to_fetch(
        self,
        limit: int,
        stale_after: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> list[FeedModel]:
        """Select the feeds most in need of fetching.

        Feeds never fetched come first, then the least recently fetched.
        With ``stale_after`` set, feeds fetched within that window are
        excluded.

        Args:
            limit: Maximum number of feeds to return
            stale_after: Age after which a fetched feed is due again
            now: Reference time for the staleness window

        Returns:
            List of FeedModel instances
        """
        query = self.session.query(FeedModel)

        if stale_after is not None:
            cutoff = (now or utcnow()) - stale_after
            query = query.filter(
                or_(FeedModel.last_fetched_at.is_(None), FeedModel.last_fetched_at < cutoff)
            )

        return (
            query.order_by(
                asc(FeedModel.last_fetched_at).nulls_first(),
                asc(FeedModel.created_at),
            )
            .limit(limit)
            .all()
        )

    def mark_fetched(self, feed_id: uuid.UUID, fetched_at: Optional[datetime] = None) -> bool:
        """Stamp a feed's last-fetched and updated times.

        Args:
            feed_id: Feed ID
            fetched_at: Fetch time (defaults to now)

        Returns:
            True if a feed was updated, False if it no longer exists
        """
        fetched_at = fetched_at or utcnow()
        updated = (
            self.session.query(FeedModel)
            .filter(FeedModel.id == feed_id)
            .update(
                {FeedModel.last_fetched_at: fetched_at, FeedModel.updated_at: fetched_at},
                synchronize_session="fetch",
            )
        )
        self.session.flush()
        return updated > 0
