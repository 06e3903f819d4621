"""
Feed follow API blueprint.
"""

import uuid

from blog_aggregator.core.auth import require_api_key
from blog_aggregator.exceptions import ClientInputError, NotFoundError
from blog_aggregator.logger import get_logger
from blog_aggregator.models import FeedFollowCreate
from blog_aggregator.storage.repositories import FeedFollowRepository, FeedRepository
from blog_aggregator.web.blueprints.base import ApiBlueprint
from blog_aggregator.web.serializers import feed_follow_to_dict, json_response

logger = get_logger(__name__)


class FeedFollowBlueprint(ApiBlueprint):
    """Blueprint for following and unfollowing feeds."""

    def _register_routes(self) -> None:
        self.blueprint.add_url_rule(
            "/feed_follows", view_func=require_api_key(self._create), methods=["POST"]
        )
        self.blueprint.add_url_rule(
            "/feed_follows/all", view_func=require_api_key(self._list_mine), methods=["GET"]
        )
        self.blueprint.add_url_rule(
            "/feed_follows/<follow_id>",
            view_func=require_api_key(self._delete),
            methods=["DELETE"],
        )

    def _create(self, user):
        follow_in = self.parse_body(FeedFollowCreate)

        with self.session_scope("Failed to create feed follow", "Feed already followed") as session:
            if FeedRepository(session).get_by_id(follow_in.feed_id) is None:
                raise NotFoundError("Feed not found")

            repo = FeedFollowRepository(session)
            if repo.get_by_user_and_feed(user.id, follow_in.feed_id):
                raise ClientInputError("Feed already followed")

            data = feed_follow_to_dict(repo.create(follow_in, user_id=user.id))

        return json_response(data, 201)

    def _delete(self, follow_id: str, user):
        """Unfollow. Only the caller's own follows can be deleted."""
        try:
            follow_uuid = uuid.UUID(follow_id)
        except ValueError as e:
            raise ClientInputError("Invalid feed follow ID") from e

        with self.session_scope("Failed to delete feed follow") as session:
            repo = FeedFollowRepository(session)
            follow = repo.get_for_user(follow_uuid, user.id)
            if follow is None:
                raise NotFoundError("Feed follow not found")
            repo.delete(follow)

        logger.info(f"User {user.id} deleted feed follow {follow_uuid}")
        return "", 204

    def _list_mine(self, user):
        with self.session_scope("Failed to retrieve feed follows") as session:
            follows = FeedFollowRepository(session).list_by_user(user.id)
            data = [feed_follow_to_dict(follow) for follow in follows]

        return json_response(data)
