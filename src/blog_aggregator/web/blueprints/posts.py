"""
Post API blueprint: the caller's aggregated reading list.
"""

from flask import current_app, request

from blog_aggregator.core.auth import require_api_key
from blog_aggregator.exceptions import ClientInputError
from blog_aggregator.storage.repositories import PostRepository
from blog_aggregator.web.blueprints.base import ApiBlueprint
from blog_aggregator.web.serializers import json_response, post_to_dict


def parse_limit(raw: str | None, default: int) -> int:
    """Parse the ``limit`` query parameter.

    Raises:
        ClientInputError: If it is not a positive integer
    """
    if raw is None or raw == "":
        return default

    try:
        limit = int(raw)
    except ValueError as e:
        raise ClientInputError("Invalid limit parameter") from e

    if limit <= 0:
        raise ClientInputError("Invalid limit parameter")
    return limit


class PostBlueprint(ApiBlueprint):
    """Blueprint for reading posts."""

    def _register_routes(self) -> None:
        self.blueprint.add_url_rule(
            "/posts", view_func=require_api_key(self._list_mine), methods=["GET"]
        )

    def _list_mine(self, user):
        default = current_app.config.get("DEFAULT_POSTS_LIMIT", 10)
        limit = parse_limit(request.args.get("limit"), default)

        with self.session_scope("Failed to retrieve posts") as session:
            posts = PostRepository(session).list_for_user(user.id, limit=limit)
            data = [post_to_dict(post) for post in posts]

        return json_response(data)
