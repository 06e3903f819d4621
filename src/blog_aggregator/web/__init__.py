"""Web API for the blog aggregator."""

from blog_aggregator.web.app import create_app

__all__ = ["create_app"]
