"""
Raw Aggregation Fetcher Tests (seeded MYR data, see conftest.seeded_app)
"""
from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from models.database import db
from models.transaction import Withdraw
from services.data_source import (
    DataSourceError,
    fetch_distinct,
    fetch_latest_row,
    fetch_max_date,
    fetch_month_date_ranges,
    fetch_rows,
    is_transaction_table,
)
from services.kpi.base import SummaryRow, TransactionRow
from utils.filter_builder import QueryFilter
from utils.normalize import ValidationError


@pytest.fixture
def ctx(seeded_app):
    with seeded_app.app_context():
        yield


@pytest.mark.usefixtures("ctx")
class TestFetchRows:

    def test_transaction_rows(self):
        rows = fetch_rows('deposit', QueryFilter(currency='MYR'))

        assert len(rows) == 3
        assert all(isinstance(row, TransactionRow) for row in rows)
        assert rows[0].proc_sec == 5.0
        assert rows[0].hour == 10
        assert rows[0].date == date(2025, 2, 10)

    def test_brand_and_allow_list(self):
        assert len(fetch_rows('deposit', QueryFilter(currency='MYR', line='XYZ'))) == 1
        assert len(fetch_rows('deposit', QueryFilter(currency='MYR', lines=('ABC',)))) == 2
        assert fetch_rows('deposit', QueryFilter(currency='MYR', lines=())) == []

    def test_summary_rows_by_month(self):
        rows = fetch_rows('blue_whale_myr_summary', QueryFilter(currency='MYR', year=2025, month='January'))

        assert all(isinstance(row, SummaryRow) for row in rows)
        assert sum(row.deposit_amount for row in rows) == 1500

    def test_member_rows_min_deposit_cases(self):
        qf = QueryFilter(
            currency='MYR', date_from=date(2025, 1, 1), date_to=date(2025, 1, 31), min_deposit_cases=1,
        )
        keys = sorted(row.user_key for row in fetch_rows('blue_whale_myr', qf))
        assert keys == ['u1', 'u2', 'u3']

    def test_no_match_is_empty(self):
        assert fetch_rows('withdraw', QueryFilter(currency='MYR')) == []
        assert fetch_rows('deposit', QueryFilter(currency='USC')) == []

    def test_unknown_table(self):
        with pytest.raises(ValidationError):
            fetch_rows('transactions', QueryFilter(currency='MYR'))

    def test_negative_proc_sec_rejected(self):
        db.session.add(Withdraw(
            date=date(2025, 2, 12), currency='MYR', line='ABC', amount=10, proc_sec=-1,
        ))
        db.session.commit()

        with pytest.raises(DataSourceError) as exc:
            fetch_rows('withdraw', QueryFilter(currency='MYR'))
        assert exc.value.table == 'withdraw'

    def test_database_failure_becomes_data_source_error(self):
        failure = OperationalError("SELECT 1", {}, Exception("connection reset"))
        with patch.object(db.session, 'execute', side_effect=failure):
            with pytest.raises(DataSourceError):
                fetch_rows('deposit', QueryFilter(currency='MYR'))


@pytest.mark.usefixtures("ctx")
class TestFetchHelpers:

    def test_fetch_distinct(self):
        assert fetch_distinct('blue_whale_myr_summary', 'line', QueryFilter(currency='MYR')) == ['ABC', 'XYZ']

    def test_fetch_distinct_rejects_other_columns(self):
        with pytest.raises(ValidationError):
            fetch_distinct('deposit', 'amount', QueryFilter(currency='MYR'))
        with pytest.raises(ValidationError):
            fetch_distinct('blue_whale_myr_summary', 'operator_group', QueryFilter(currency='MYR'))

    def test_fetch_max_date(self):
        assert fetch_max_date('blue_whale_myr_summary', QueryFilter(currency='MYR')) == date(2025, 2, 11)
        assert fetch_max_date('deposit', QueryFilter(currency='SGD')) is None

    def test_fetch_month_date_ranges(self):
        ranges = fetch_month_date_ranges('blue_whale_myr_summary', QueryFilter(currency='MYR'))

        assert list(ranges) == ['2025-January', '2025-February']
        assert ranges['2025-January'] == {'min': '2025-01-15', 'max': '2025-01-20'}
        assert ranges['2025-February'] == {'min': '2025-02-10', 'max': '2025-02-11'}

    def test_fetch_latest_row(self):
        latest = fetch_latest_row('blue_whale_myr_summary', QueryFilter(currency='MYR', line='ABC'))
        assert latest.date == date(2025, 2, 10)
        assert latest.line == 'ABC'
        assert fetch_latest_row('blue_whale_myr_summary', QueryFilter(currency='SGD')) is None

    def test_is_transaction_table(self):
        assert is_transaction_table('deposit')
        assert not is_transaction_table('member_report_daily')
