"""
Feed follow repository for database operations.
"""

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from blog_aggregator.models import FeedFollowCreate, FeedFollowModel
from blog_aggregator.storage.repositories.base import BaseRepository


class FeedFollowRepository(BaseRepository[FeedFollowModel, FeedFollowCreate]):
    """Repository for the user-follows-feed association."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, FeedFollowModel)

    def create(self, obj_in: FeedFollowCreate, user_id: uuid.UUID) -> FeedFollowModel:
        """Follow a feed on behalf of a user.

        Raises:
            sqlalchemy.exc.IntegrityError: If the feed does not exist or the
                user already follows it
        """
        return super().create(obj_in, user_id=user_id)

    def get_for_user(self, follow_id: uuid.UUID, user_id: uuid.UUID) -> Optional[FeedFollowModel]:
        """Get a follow by ID, only if it belongs to the user."""
        return (
            self.session.query(FeedFollowModel)
            .filter(FeedFollowModel.id == follow_id, FeedFollowModel.user_id == user_id)
            .first()
        )

    def get_by_user_and_feed(
        self, user_id: uuid.UUID, feed_id: uuid.UUID
    ) -> Optional[FeedFollowModel]:
        return (
            self.session.query(FeedFollowModel)
            .filter(FeedFollowModel.user_id == user_id, FeedFollowModel.feed_id == feed_id)
            .first()
        )

    def list_by_user(self, user_id: uuid.UUID) -> list[FeedFollowModel]:
        return self.list(user_id=user_id)
