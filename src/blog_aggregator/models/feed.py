"""
Feed and FeedFollow data models.
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog_aggregator.models.base import Base, utcnow

if TYPE_CHECKING:
    from blog_aggregator.models.post import PostModel
    from blog_aggregator.models.user import UserModel


class FeedModel(Base):
    """SQLAlchemy ORM model for Feed."""

    __tablename__ = "feeds"

    __table_args__ = (
        Index("ix_feeds_last_fetched_at", "last_fetched_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )
    last_fetched_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    user: Mapped[Optional["UserModel"]] = relationship("UserModel", back_populates="feeds")
    follows: Mapped[list["FeedFollowModel"]] = relationship(
        "FeedFollowModel",
        back_populates="feed",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    posts: Mapped[list["PostModel"]] = relationship(
        "PostModel",
        back_populates="feed",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<FeedModel(id={self.id}, url='{self.url}', name='{self.name}')>"


class FeedFollowModel(Base):
    """A user following a feed."""

    __tablename__ = "feed_follows"

    __table_args__ = (
        UniqueConstraint("user_id", "feed_id", name="uq_feed_follows_user_feed"),
        Index("ix_feed_follows_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    feed_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    feed: Mapped["FeedModel"] = relationship("FeedModel", back_populates="follows")
    user: Mapped["UserModel"] = relationship("UserModel", back_populates="feed_follows")

    def __repr__(self) -> str:
        return f"<FeedFollowModel(id={self.id}, user_id={self.user_id}, feed_id={self.feed_id})>"


# Pydantic models for API


class FeedCreate(BaseModel):
    """Schema for creating a new feed."""

    name: str = Field(..., max_length=500, description="Feed name")
    url: str = Field(..., min_length=1, max_length=2048, description="Feed URL")


class FeedResponse(BaseModel):
    """Schema for feed response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    url: str
    user_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    last_fetched_at: Optional[datetime] = None


class FeedFollowCreate(BaseModel):
    """Schema for following a feed."""

    feed_id: uuid.UUID


class FeedFollowResponse(BaseModel):
    """Schema for feed follow response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    feed_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
