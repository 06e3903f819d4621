"""
User repository for database operations.
"""

import hashlib
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from blog_aggregator.models import UserCreate, UserModel
from blog_aggregator.storage.repositories.base import BaseRepository


def generate_api_key() -> str:
    """Generate a new API key: the sha256 hex digest of 32 random bytes."""
    return hashlib.sha256(secrets.token_bytes(32)).hexdigest()


class UserRepository(BaseRepository[UserModel, UserCreate]):
    """Repository for users and API key lookups."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, UserModel)

    def create(self, obj_in: UserCreate) -> UserModel:
        """Create a user with a freshly generated API key.

        Args:
            obj_in: User registration data

        Returns:
            Created UserModel instance
        """
        return super().create(obj_in, api_key=generate_api_key())

    def get_by_api_key(self, api_key: str) -> Optional[UserModel]:
        """Get the user owning an API key.

        Args:
            api_key: Bare API key (no "ApiKey " prefix)

        Returns:
            UserModel instance or None
        """
        return self.session.query(UserModel).filter(UserModel.api_key == api_key).first()
