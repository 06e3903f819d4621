"""
Serializer functions for converting models to JSON-ready dictionaries,
plus the response helpers every endpoint uses.

Success bodies are the bare entity (or list of entities); error bodies are
always ``{"error": "<message>"}``.
"""

from typing import Any

from flask import jsonify

from blog_aggregator.models import (
    FeedFollowResponse,
    FeedResponse,
    PostResponse,
    UserResponse,
)


def user_to_dict(user) -> dict:
    """Convert a UserModel to a dictionary, API key included."""
    return UserResponse.model_validate(user).model_dump(mode="json")


def feed_to_dict(feed) -> dict:
    return FeedResponse.model_validate(feed).model_dump(mode="json")


def feed_follow_to_dict(feed_follow) -> dict:
    return FeedFollowResponse.model_validate(feed_follow).model_dump(mode="json")


def post_to_dict(post) -> dict:
    return PostResponse.model_validate(post).model_dump(mode="json")


def json_response(data: Any, status: int = 200) -> tuple:
    """Serialize ``data`` as the response body.

    Args:
        data: JSON-ready payload
        status: HTTP status code

    Returns:
        Flask (response, status) tuple
    """
    return jsonify(data), status


def error_response(message: str, status: int) -> tuple:
    """Build the standard error body."""
    return jsonify({"error": message}), status
