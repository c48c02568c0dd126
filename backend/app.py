"""
Flask Application Factory - KPI Analytics API

Every KPI is computed per request from rows fetched through SQLAlchemy:
deposit/withdraw transactions and the blue_whale_* summary tables.
No cache, no background jobs; the only writes are BP target saves.
"""

import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from config import Config, require_database_url
from models.database import db

logger = logging.getLogger(__name__)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    _configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    if not app.config.get('TESTING'):
        require_database_url(app.config.get('SQLALCHEMY_DATABASE_URI'))

    # Dashboard frontend lives on another origin; the API is read-only apart
    # from targets, which are permission-checked per request.
    CORS(app,
         resources={r"/api/*": {"origins": "*"}},
         methods=["GET", "POST", "OPTIONS"],
         allow_headers=[
             "Content-Type", "X-Request-ID",
             "X-User-Allowed-Brands", "X-User-Role", "X-User-Email",
         ],
         expose_headers=["X-Request-ID"],
         supports_credentials=False,
         send_wildcard=True)

    # === API MIDDLEWARE ===
    from api.middleware import (
        setup_error_handlers,
        setup_request_id_middleware,
        setup_request_logging_middleware,
    )
    setup_request_id_middleware(app)
    setup_request_logging_middleware(app)
    setup_error_handlers(app)

    from utils.rate_limiter import init_limiter
    app.limiter = init_limiter(app)

    db.init_app(app)

    with app.app_context():
        # Import all models before create_all so every table is registered
        import models  # noqa: F401

        env = (os.environ.get("ENV") or os.environ.get("FLASK_ENV") or os.environ.get("APP_ENV") or "").lower()
        is_prod = env in {"prod", "production"}
        if app.config.get("TESTING") or not is_prod:
            db.create_all()
            logger.info("Database tables ensured")
        else:
            logger.info("Schema creation disabled in production")

    from routes.analytics import analytics_bp
    app.register_blueprint(analytics_bp, url_prefix='/api')

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "name": "Blue Whale KPI Analytics API",
            "status": "running",
        })

    return app


def run_app():
    """Local development entry point."""
    app = create_app()
    app.run(debug=app.config.get('DEBUG', False), host="0.0.0.0", port=int(os.getenv('PORT', '5000')))


if __name__ == "__main__":
    run_app()
