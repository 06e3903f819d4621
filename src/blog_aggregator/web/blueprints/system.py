"""
Liveness and diagnostic endpoints.
"""

from blog_aggregator.exceptions import AggregatorError
from blog_aggregator.web.blueprints.base import ApiBlueprint
from blog_aggregator.web.serializers import json_response


class SystemBlueprint(ApiBlueprint):
    """Blueprint for health check endpoints."""

    def _register_routes(self) -> None:
        self.blueprint.add_url_rule("/healthz", view_func=self._healthz, methods=["GET"])
        self.blueprint.add_url_rule("/err", view_func=self._err, methods=["GET"])

    def _healthz(self):
        return json_response({"status": "ok"})

    def _err(self):
        """Always fail, to exercise the error path."""
        raise AggregatorError("Internal Server Error")
