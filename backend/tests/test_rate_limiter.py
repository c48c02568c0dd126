"""
Rate limiting: envelope on 429 and the per-caller key.
"""
from app import create_app
from config import TestConfig
from models.database import db


class LimitedConfig(TestConfig):
    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT_LIMITS = ["2 per minute"]


def test_limit_exceeded_uses_error_envelope():
    app = create_app(LimitedConfig)
    client = app.test_client()
    try:
        assert client.get('/api/ping').status_code == 200
        assert client.get('/api/ping').status_code == 200

        response = client.get('/api/ping')
        assert response.status_code == 429
        body = response.get_json()
        assert body['success'] is False
        assert body['code'] == 'TOO_MANY_REQUESTS'
    finally:
        with app.app_context():
            db.session.remove()
            db.drop_all()


def test_limits_are_tracked_per_caller():
    app = create_app(LimitedConfig)
    client = app.test_client()
    try:
        for _ in range(2):
            client.get('/api/ping', headers={'X-User-Email': 'a@example.com'})

        assert client.get('/api/ping', headers={'X-User-Email': 'a@example.com'}).status_code == 429
        assert client.get('/api/ping', headers={'X-User-Email': 'b@example.com'}).status_code == 200
    finally:
        with app.app_context():
            db.session.remove()
            db.drop_all()


def test_disabled_in_test_config(client):
    for _ in range(5):
        assert client.get('/api/ping').status_code == 200
