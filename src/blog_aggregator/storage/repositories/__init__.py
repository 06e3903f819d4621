"""Repository pattern implementations for data access."""

from blog_aggregator.storage.repositories.feed_follow_repo import FeedFollowRepository
from blog_aggregator.storage.repositories.feed_repo import FeedRepository
from blog_aggregator.storage.repositories.post_repo import PostRepository
from blog_aggregator.storage.repositories.user_repo import UserRepository, generate_api_key

__all__ = [
    "FeedFollowRepository",
    "FeedRepository",
    "PostRepository",
    "UserRepository",
    "generate_api_key",
]
