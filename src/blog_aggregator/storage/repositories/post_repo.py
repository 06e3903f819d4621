"""
Post repository for database operations.
"""

import uuid
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from blog_aggregator.models import FeedFollowModel, PostCreate, PostModel
from blog_aggregator.storage.repositories.base import BaseRepository


class PostRepository(BaseRepository[PostModel, PostCreate]):
    """Repository for posts.

    ``create`` is the storage side of ingestion; reading is per user,
    through the feeds they follow.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, PostModel)

    def get_by_url(self, url: str) -> Optional[PostModel]:
        return self.session.query(PostModel).filter(PostModel.url == url).first()

    def list_for_user(self, user_id: uuid.UUID, limit: int = 10) -> list[PostModel]:
        """Get the newest posts from feeds a user follows.

        Posts without a publish date sort after dated ones.

        Args:
            user_id: Following user
            limit: Maximum number of posts

        Returns:
            List of PostModel instances, newest first
        """
        followed = select(FeedFollowModel.feed_id).where(FeedFollowModel.user_id == user_id)

        return (
            self.session.query(PostModel)
            .filter(PostModel.feed_id.in_(followed))
            .order_by(
                desc(PostModel.published_at).nulls_last(),
                desc(PostModel.created_at),
            )
            .limit(limit)
            .all()
        )
