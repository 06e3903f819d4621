"""Data models for the blog aggregator."""

from blog_aggregator.models.base import Base, utcnow
from blog_aggregator.models.feed import (
    FeedCreate,
    FeedFollowCreate,
    FeedFollowModel,
    FeedFollowResponse,
    FeedModel,
    FeedResponse,
)
from blog_aggregator.models.post import PostCreate, PostModel, PostResponse
from blog_aggregator.models.user import UserCreate, UserModel, UserResponse

__all__ = [
    "Base",
    "utcnow",
    "UserModel",
    "UserCreate",
    "UserResponse",
    "FeedModel",
    "FeedCreate",
    "FeedResponse",
    "FeedFollowModel",
    "FeedFollowCreate",
    "FeedFollowResponse",
    "PostModel",
    "PostCreate",
    "PostResponse",
]
