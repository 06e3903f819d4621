"""
Post data model: an item published by a feed.
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog_aggregator.models.base import Base, utcnow

if TYPE_CHECKING:
    from blog_aggregator.models.feed import FeedModel


class PostModel(Base):
    """SQLAlchemy ORM model for Post."""

    __tablename__ = "posts"

    __table_args__ = (
        Index("ix_posts_feed_published", "feed_id", "published_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    feed_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    feed: Mapped["FeedModel"] = relationship("FeedModel", back_populates="posts")

    def __repr__(self) -> str:
        return f"<PostModel(id={self.id}, title='{self.title[:50]}...')>"


# Pydantic models for API


class PostCreate(BaseModel):
    """Schema for storing an ingested post."""

    feed_id: uuid.UUID
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1, max_length=2048)
    description: Optional[str] = None
    published_at: Optional[datetime] = None


class PostResponse(BaseModel):
    """Schema for post response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    feed_id: uuid.UUID
    title: str
    url: str
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
