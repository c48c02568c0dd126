"""
Health Endpoints

Endpoints:
- /ping - Liveness (no DB)
- /health - Database readiness
"""

from flask import jsonify

from routes.analytics import analytics_bp
from services.health import check_database_ready


@analytics_bp.route("/ping", methods=["GET"])
def ping():
    return jsonify({"status": "ok"})


@analytics_bp.route("/health", methods=["GET"])
def health():
    """Readiness check; 503 when the database does not answer."""
    if check_database_ready():
        return jsonify({"status": "healthy", "database": "ok"})
    return jsonify({"status": "unhealthy", "database": "unreachable"}), 503
