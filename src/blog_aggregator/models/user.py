"""
User data model: a registered identity with its API key.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog_aggregator.models.base import Base, utcnow

if TYPE_CHECKING:
    from blog_aggregator.models.feed import FeedFollowModel, FeedModel


class UserModel(Base):
    """SQLAlchemy ORM model for User."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(500), nullable=False)

    # sha256 hex digest, generated once at creation
    api_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    feeds: Mapped[list["FeedModel"]] = relationship(
        "FeedModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    feed_follows: Mapped[list["FeedFollowModel"]] = relationship(
        "FeedFollowModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, name='{self.name}')>"


# Pydantic models for API


class UserCreate(BaseModel):
    """Schema for registering a user."""

    name: str = Field(..., max_length=500, description="Display name")


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    api_key: str
    created_at: datetime
    updated_at: datetime
