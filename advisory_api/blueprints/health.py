"""Health check blueprint."""

from datetime import datetime, timezone

from flask import Blueprint, Response, current_app, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Health check endpoint.

    Returns:
        JSON response with status information
    """
    return jsonify({"status": "ok"})


@health_bp.route("/api/health")
def api_health() -> Response:
    """Liveness endpoint under the API prefix, with environment details."""
    return jsonify(
        {
            "status": "ok",
            "environment": current_app.config.get("ENV"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
