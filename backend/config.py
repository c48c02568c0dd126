import os
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse
from dotenv import load_dotenv

load_dotenv()

VALID_DATABASE_PREFIXES = ('postgresql://', 'postgresql+psycopg2://', 'postgres://')


def normalize_database_url(database_url):
    """
    Normalize a DATABASE_URL for SQLAlchemy.

    - Supabase/Render hand out postgres:// URLs; SQLAlchemy requires postgresql://
    - Non-local hosts get sslmode=require unless the URL already sets it

    Returns None when no URL is given so the app factory can decide whether
    that is fatal (it is, outside of testing).
    """
    if not database_url:
        return None

    if database_url.startswith('postgres://'):
        database_url = database_url.replace('postgres://', 'postgresql://', 1)

    parsed = urlparse(database_url)
    is_localhost = parsed.hostname in ('localhost', '127.0.0.1', None)

    if not is_localhost and database_url.startswith(VALID_DATABASE_PREFIXES):
        query_params = parse_qs(parsed.query)
        if 'sslmode' not in query_params:
            query_params['sslmode'] = ['require']
            new_query = urlencode(query_params, doseq=True)
            database_url = urlunparse((
                parsed.scheme, parsed.netloc, parsed.path,
                parsed.params, new_query, parsed.fragment
            ))

    return database_url


def require_database_url(database_url):
    """Fail fast on a missing or non-Postgres DATABASE_URL."""
    if not database_url:
        raise RuntimeError(
            "DATABASE_URL is required. Point it at the Supabase/Postgres instance "
            "holding the deposit, withdraw and blue_whale_* tables."
        )
    if not database_url.startswith(VALID_DATABASE_PREFIXES):
        raise RuntimeError(
            f"DATABASE_URL must be a PostgreSQL URL, got: {database_url[:30]}..."
        )
    return database_url


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    TESTING = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    SQLALCHEMY_DATABASE_URI = normalize_database_url(os.getenv('DATABASE_URL'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Supabase pooler drops idle connections; pre-ping and recycle aggressively
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_timeout': 30,
        'pool_size': 5,
        'max_overflow': 10,
        'connect_args': {
            'connect_timeout': 30,
            'options': '-c statement_timeout=60000',  # 1 min query timeout
        }
    }

    # Request logging (api/middleware/request_logging.py)
    REQUEST_LOG_ENABLED = os.getenv('REQUEST_LOG_ENABLED', 'true').lower() == 'true'
    REQUEST_LOG_SAMPLE_RATE = os.getenv('REQUEST_LOG_SAMPLE_RATE', '0.0')
    REQUEST_LOG_ENDPOINTS = os.getenv('REQUEST_LOG_ENDPOINTS', '')

    # Rate limiting (utils/rate_limiter.py); Redis in production, memory for dev
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'true').lower() == 'true'
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')

    # KPI policy (see services/kpi/policy.py for what each one controls)
    KPI_OVERDUE_THRESHOLD_SEC = float(os.getenv('KPI_OVERDUE_THRESHOLD_SEC', '30'))
    KPI_FAST_THRESHOLD_SEC = float(os.getenv('KPI_FAST_THRESHOLD_SEC', '10'))
    # ISO date; automation series drop rows before it. Empty = no cutoff.
    KPI_AUTOMATION_ROLLOUT_DATE = os.getenv('KPI_AUTOMATION_ROLLOUT_DATE', '')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    KPI_AUTOMATION_ROLLOUT_DATE = ''
    REQUEST_LOG_ENABLED = False
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
