"""
Root pytest configuration for backend tests.

Provides:
- backend/ on sys.path so `from services.kpi import ...` works
- app / client fixtures on in-memory SQLite (config.TestConfig)
- seeded_app: one MYR dataset shared by the route tests
"""

import sys
from datetime import date
from pathlib import Path

# Add backend directory to Python path so imports like
# `from services.kpi import ...` and `from utils.normalize import ...` work
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest


@pytest.fixture
def app():
    """Create test Flask application with an empty schema."""
    from app import create_app
    from config import TestConfig
    from models.database import db

    app = create_app(TestConfig)
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _summary(day, line, **amounts):
    from models.summary import MyrSummary
    return MyrSummary(
        date=day, year=day.year, month=day.strftime('%B'), line=line, currency='MYR', **amounts
    )


def _member(day, line, userkey, deposit_cases, unique_code=None):
    from models.summary import MyrMember
    return MyrMember(
        date=day, year=day.year, month=day.strftime('%B'), line=line, currency='MYR',
        userkey=userkey, unique_code=unique_code or userkey, deposit_cases=deposit_cases,
    )


def _deposit(day, time, line, amount, operator_group, proc_sec, userkey):
    from models.transaction import Deposit
    return Deposit(
        date=day, time=time, year=day.year, month=day.strftime('%B'), line=line, currency='MYR',
        amount=amount, operator_group=operator_group, proc_sec=proc_sec, status='Approved',
        userkey=userkey,
    )


@pytest.fixture
def seeded_app(app):
    """
    MYR dataset, brands ABC and XYZ.

    January:  deposits 1500 (15 cases), withdrawals 500; active u1, u2, u3
    February: deposits 1000 (10 cases), withdrawals 300; active u1, u3
    Deposit transactions (10 Feb): 100/5s Automation, 200/40s Automation,
    50/20s Staff.
    """
    from models.database import db

    jan_15, jan_20 = date(2025, 1, 15), date(2025, 1, 20)
    feb_10, feb_11 = date(2025, 2, 10), date(2025, 2, 11)

    with app.app_context():
        db.session.add_all([
            _summary(jan_15, 'ABC', deposit_cases=10, deposit_amount=1000,
                     withdraw_cases=4, withdraw_amount=400, new_depositor=1),
            _summary(jan_20, 'XYZ', deposit_cases=5, deposit_amount=500,
                     withdraw_cases=1, withdraw_amount=100),
            _summary(feb_10, 'ABC', deposit_cases=8, deposit_amount=800,
                     withdraw_cases=2, withdraw_amount=300),
            _summary(feb_11, 'XYZ', deposit_cases=2, deposit_amount=200,
                     withdraw_cases=0, withdraw_amount=0),

            _member(jan_15, 'ABC', 'u1', 3),
            _member(jan_15, 'ABC', 'u2', 2),
            _member(jan_20, 'XYZ', 'u3', 1),
            _member(jan_20, 'ABC', 'u4', 0),
            _member(feb_10, 'ABC', 'u1', 2),
            _member(feb_11, 'XYZ', 'u3', 1),

            _deposit(feb_10, '10:05:00', 'ABC', 100, 'Automation', 5, 'u1'),
            _deposit(feb_10, '10:30:00', 'ABC', 200, 'Automation', 40, 'u1'),
            _deposit(feb_10, '14:00:00', 'XYZ', 50, 'Staff', 20, 'u3'),
        ])
        db.session.commit()
    return app


@pytest.fixture
def seeded_client(seeded_app):
    return seeded_app.test_client()
