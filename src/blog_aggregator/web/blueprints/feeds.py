"""
Feed API blueprint.
"""

from blog_aggregator.core.auth import require_api_key
from blog_aggregator.exceptions import ClientInputError
from blog_aggregator.logger import get_logger
from blog_aggregator.models import FeedCreate, FeedFollowCreate
from blog_aggregator.storage.repositories import FeedFollowRepository, FeedRepository
from blog_aggregator.web.blueprints.base import ApiBlueprint
from blog_aggregator.web.serializers import feed_follow_to_dict, feed_to_dict, json_response

logger = get_logger(__name__)


class FeedBlueprint(ApiBlueprint):
    """Blueprint for feed endpoints."""

    def _register_routes(self) -> None:
        self.blueprint.add_url_rule(
            "/feeds", view_func=require_api_key(self._create), methods=["POST"]
        )
        self.blueprint.add_url_rule("/feeds/all", view_func=self._list_all, methods=["GET"])

    def _create(self, user):
        """Create a feed and follow it on behalf of its creator.

        Both rows are written in one transaction.
        """
        feed_in = self.parse_body(FeedCreate)

        with self.session_scope("Failed to create feed", "Feed URL already exists") as session:
            feed_repo = FeedRepository(session)
            if feed_repo.get_by_url(feed_in.url):
                raise ClientInputError("Feed URL already exists")

            feed = feed_repo.create(feed_in, user_id=user.id)
            follow = FeedFollowRepository(session).create(
                FeedFollowCreate(feed_id=feed.id), user_id=user.id
            )
            data = {"feed": feed_to_dict(feed), "feed_follow": feed_follow_to_dict(follow)}

        logger.info(f"User {user.id} created feed {feed.id} ({feed.url})")
        return json_response(data, 201)

    def _list_all(self):
        with self.session_scope("Failed to retrieve feeds") as session:
            data = [feed_to_dict(feed) for feed in FeedRepository(session).list()]

        return json_response(data)
