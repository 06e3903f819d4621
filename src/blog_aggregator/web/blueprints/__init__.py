"""API blueprints."""

from blog_aggregator.web.blueprints.feed_follows import FeedFollowBlueprint
from blog_aggregator.web.blueprints.feeds import FeedBlueprint
from blog_aggregator.web.blueprints.posts import PostBlueprint
from blog_aggregator.web.blueprints.system import SystemBlueprint
from blog_aggregator.web.blueprints.users import UserBlueprint

__all__ = [
    "FeedBlueprint",
    "FeedFollowBlueprint",
    "PostBlueprint",
    "SystemBlueprint",
    "UserBlueprint",
]
