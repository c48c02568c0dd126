import logging

from flask import Flask, jsonify

from api.middleware.request_id import setup_request_id_middleware
from api.middleware.request_logging import setup_request_logging_middleware


def _build_test_app(**config):
    app = Flask(__name__)
    app.config.update(config)

    @app.route("/api/ping", methods=["GET"])
    def ping():
        return jsonify({"status": "ok"})

    @app.route("/api/MYR/overview", methods=["GET"])
    def overview():
        return jsonify({"success": True})

    setup_request_id_middleware(app)
    setup_request_logging_middleware(app)
    return app


def _logged_paths(caplog):
    return [
        record.getMessage()
        for record in caplog.records
        if record.name == "api.request"
    ]


def test_request_logging_sample_rate(caplog):
    app = _build_test_app(REQUEST_LOG_SAMPLE_RATE="1.0", REQUEST_LOG_ENDPOINTS="")
    client = app.test_client()

    with caplog.at_level(logging.INFO, logger="api.request"):
        response = client.get("/api/ping")

    assert response.status_code == 200
    assert any("api_request path=/api/ping" in message for message in _logged_paths(caplog))


def test_request_logging_watchlist(caplog):
    app = _build_test_app(REQUEST_LOG_SAMPLE_RATE="0.0", REQUEST_LOG_ENDPOINTS="/api/MYR")
    client = app.test_client()

    with caplog.at_level(logging.INFO, logger="api.request"):
        client.get("/api/ping")
        client.get("/api/MYR/overview")

    messages = _logged_paths(caplog)
    assert any("path=/api/MYR/overview" in message for message in messages)
    assert not any("path=/api/ping" in message for message in messages)


def test_request_logging_disabled(caplog):
    app = _build_test_app(REQUEST_LOG_ENABLED=False, REQUEST_LOG_SAMPLE_RATE="1.0")
    client = app.test_client()

    with caplog.at_level(logging.INFO, logger="api.request"):
        client.get("/api/ping")

    assert _logged_paths(caplog) == []


def test_invalid_sample_rate_disables_sampling(caplog):
    app = _build_test_app(REQUEST_LOG_SAMPLE_RATE="often")
    client = app.test_client()

    with caplog.at_level(logging.INFO, logger="api.request"):
        client.get("/api/ping")

    assert not any("api_request" in message for message in _logged_paths(caplog))
