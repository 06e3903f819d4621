"""
Flask application for the blog aggregator API.
"""

from typing import Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from blog_aggregator.config import Config, get_config
from blog_aggregator.core.auth import AuthGate, db_user_lookup
from blog_aggregator.exceptions import AggregatorError, MethodError, NotFoundError
from blog_aggregator.logger import get_logger
from blog_aggregator.storage.database import DatabaseManager
from blog_aggregator.web.blueprints import (
    FeedBlueprint,
    FeedFollowBlueprint,
    PostBlueprint,
    SystemBlueprint,
    UserBlueprint,
)
from blog_aggregator.web.serializers import error_response

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    db_manager: Optional[DatabaseManager] = None,
    auth_gate: Optional[AuthGate] = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Application configuration (defaults to the global config)
        db_manager: Storage handle shared by all routes
        auth_gate: Credential gate (defaults to API key lookup in db_manager)

    Returns:
        Configured Flask application
    """
    config = config or get_config()
    db_manager = db_manager or DatabaseManager(db_config=config.database)

    app = Flask(__name__)
    app.config["DEBUG"] = config.debug or config.web.debug
    app.json.sort_keys = False
    app.config["DEFAULT_POSTS_LIMIT"] = config.web.default_posts_limit

    app.extensions["db_manager"] = db_manager
    app.extensions["auth_gate"] = auth_gate or AuthGate(db_user_lookup(db_manager))

    # ========================================================================
    # Register API Blueprints
    # ========================================================================

    for blueprint_class in (
        SystemBlueprint,
        UserBlueprint,
        FeedBlueprint,
        FeedFollowBlueprint,
        PostBlueprint,
    ):
        app.register_blueprint(blueprint_class(db_manager).blueprint)

    @app.route("/")
    def index():
        return "Hello, Blog Aggregator!", 200, {"Content-Type": "text/plain; charset=utf-8"}

    # ========================================================================
    # Error Handlers
    # ========================================================================

    @app.errorhandler(AggregatorError)
    def handle_aggregator_error(e: AggregatorError):
        if e.status_code >= 500:
            logger.error(f"Request failed: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        # Routing errors get the same JSON body as application errors
        if e.code == 404:
            return handle_aggregator_error(NotFoundError("Not found"))
        if e.code == 405:
            return handle_aggregator_error(MethodError())
        return error_response(e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception(f"Unhandled error: {e}")
        return error_response("Internal Server Error", 500)

    logger.info(f"Web app created with database: {db_manager.db_config.resolved_type}")

    return app
