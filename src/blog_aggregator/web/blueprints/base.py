"""
Base blueprint for the versioned JSON API.

Subclasses register their routes on ``self.blueprint`` and use the helpers
here for body validation and storage-error translation.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator, Optional, TypeVar

from flask import Blueprint, request
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blog_aggregator.exceptions import AggregatorError, ClientInputError, StorageError
from blog_aggregator.logger import get_logger

logger = get_logger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)

API_PREFIX = "/v1"


class ApiBlueprint(ABC):
    """Base class for API blueprints.

    The database manager is injected, never looked up globally.
    """

    def __init__(self, db_manager, url_prefix: str = API_PREFIX):
        """Initialize the blueprint.

        Args:
            db_manager: DatabaseManager used by every route
            url_prefix: URL prefix for all routes in this blueprint
        """
        self.db_manager = db_manager
        self.blueprint = Blueprint(
            self._get_blueprint_name(),
            self.__class__.__module__,
            url_prefix=url_prefix,
        )
        self._register_routes()

    def _get_blueprint_name(self) -> str:
        """Get the blueprint name from the class name."""
        return self.__class__.__name__.replace("Blueprint", "").lower()

    @abstractmethod
    def _register_routes(self) -> None:
        """Register the blueprint's routes."""
        pass

    def parse_body(self, schema: type[SchemaType]) -> SchemaType:
        """Validate the JSON request body against a Pydantic schema.

        Raises:
            ClientInputError: Body is missing, not a JSON object, or invalid
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ClientInputError("Invalid request payload")

        try:
            return schema(**data)
        except ValidationError as e:
            logger.debug(f"Rejected {schema.__name__} payload: {e.errors()}")
            raise ClientInputError("Invalid request payload") from e

    @contextmanager
    def session_scope(
        self, failure_message: str, conflict_message: Optional[str] = None
    ) -> Generator[Session, None, None]:
        """Open a transactional session, translating storage failures.

        Args:
            failure_message: Client-facing message if storage fails
            conflict_message: Client-facing message for a unique constraint
                violation; without one it is treated as a storage failure

        Raises:
            ClientInputError: On an IntegrityError when conflict_message is set
            StorageError: On any other SQLAlchemy error (detail is only logged)
        """
        try:
            with self.db_manager.session() as session:
                yield session
        except AggregatorError:
            raise
        except IntegrityError as e:
            if conflict_message is None:
                logger.error(f"{failure_message}: {e}")
                raise StorageError(failure_message) from e
            logger.warning(f"{conflict_message}: {e.orig}")
            raise ClientInputError(conflict_message) from e
        except SQLAlchemyError as e:
            logger.error(f"{failure_message}: {e}")
            raise StorageError(failure_message) from e
