"""
User API blueprint: registration and API key lookup.
"""

from flask import current_app, request

from blog_aggregator.exceptions import InvalidCredentialError, NotFoundError, StorageError
from blog_aggregator.logger import get_logger
from blog_aggregator.models import UserCreate
from blog_aggregator.storage.repositories import UserRepository
from blog_aggregator.web.blueprints.base import ApiBlueprint
from blog_aggregator.web.serializers import json_response, user_to_dict

logger = get_logger(__name__)


class UserBlueprint(ApiBlueprint):
    """Blueprint for user endpoints."""

    def _register_routes(self) -> None:
        self.blueprint.add_url_rule("/users", view_func=self._create, methods=["POST"])
        self.blueprint.add_url_rule("/user", view_func=self._get_current, methods=["GET"])

    def _create(self):
        """Register a user and return it with its new API key."""
        user_in = self.parse_body(UserCreate)

        with self.session_scope("Failed to create user") as session:
            user = UserRepository(session).create(user_in)
            data = user_to_dict(user)

        logger.info(f"Created user {data['id']}")
        return json_response(data, 201)

    def _get_current(self):
        """Return the user owning the presented API key.

        Unlike the gated endpoints, an unknown key is reported as 404.
        """
        gate = current_app.extensions["auth_gate"]
        try:
            user = gate.authenticate(request.headers)
        except InvalidCredentialError as e:
            raise NotFoundError("User not found") from e
        except StorageError as e:
            raise StorageError("Failed to retrieve user") from e

        return json_response(user_to_dict(user))
