"""
Time-Series Builder Tests

Bucket keys, bucket coverage (lossless aggregation) and the rollout floor.
"""
from datetime import date

import pytest

from services.kpi.base import SummaryRow, TransactionRow
from services.kpi.calculator import KIND_SUMMARY, calculate_kpis
from services.kpi.time_series import (
    BUCKET_DAILY,
    BUCKET_HOURLY,
    BUCKET_MONTHLY,
    BUCKET_WEEKLY,
    build_time_series,
    to_chart_series,
    week_key,
)
from utils.normalize import ValidationError


def _tx(day, time='09:15:00', group='Automation', proc_sec=5, amount=10):
    return TransactionRow(date=day, time=time, amount=amount, operator_group=group, proc_sec=proc_sec)


@pytest.fixture
def rows():
    return [
        _tx(date(2025, 1, 1)),
        _tx(date(2025, 1, 1), time='23:59:00'),
        _tx(date(2025, 1, 5), group='Staff', proc_sec=45),
        _tx(date(2025, 2, 3)),
        _tx(date(2025, 2, 28), time=None),
    ]


class TestWeekKey:

    def test_first_week_contains_jan_1(self):
        # 1 Jan 2025 is a Wednesday; the week runs Sun 29 Dec - Sat 4 Jan
        assert week_key(date(2025, 1, 1)) == '2025-W01'
        assert week_key(date(2025, 1, 4)) == '2025-W01'

    def test_sunday_starts_a_new_week(self):
        assert week_key(date(2025, 1, 5)) == '2025-W02'
        assert week_key(date(2025, 1, 11)) == '2025-W02'
        assert week_key(date(2025, 1, 12)) == '2025-W03'

    def test_zero_padded(self):
        assert week_key(date(2025, 12, 31)).startswith('2025-W5')


class TestBuildTimeSeries:

    @pytest.mark.parametrize("bucket", [BUCKET_DAILY, BUCKET_WEEKLY, BUCKET_MONTHLY])
    def test_bucket_coverage(self, rows, bucket):
        series = build_time_series(rows, bucket)
        assert sum(point['depositCases'] for point in series) == calculate_kpis(rows).deposit_cases

    def test_daily_keys_sorted(self, rows):
        series = build_time_series(rows, BUCKET_DAILY)
        periods = [point['period'] for point in series]
        assert periods == ['2025-01-01', '2025-01-05', '2025-02-03', '2025-02-28']

    def test_monthly_keys(self, rows):
        series = build_time_series(rows, BUCKET_MONTHLY)
        assert [(p['period'], p['depositCases']) for p in series] == [('2025-01', 3), ('2025-02', 2)]

    def test_weekly_recomputes_kpis_per_bucket(self, rows):
        series = build_time_series(rows, BUCKET_WEEKLY)
        second_week = next(p for p in series if p['period'] == '2025-W02')
        assert second_week['overdueTransactions'] == 1
        assert second_week['manualTransactions'] == 1

    def test_hourly_skips_rows_without_time(self, rows):
        series = build_time_series(rows, BUCKET_HOURLY)
        assert [(p['period'], p['depositCases']) for p in series] == [('09:00', 3), ('23:00', 1)]

    def test_date_floor_drops_earlier_rows(self, rows):
        series = build_time_series(rows, BUCKET_DAILY, date_floor=date(2025, 2, 1))
        assert [p['period'] for p in series] == ['2025-02-03', '2025-02-28']

    def test_summary_rows(self):
        rows = [
            SummaryRow(date=date(2025, 3, 1), deposit_cases=2, deposit_amount=20),
            SummaryRow(date=date(2025, 3, 1), deposit_cases=1, deposit_amount=5),
            SummaryRow(date=date(2025, 3, 2), deposit_cases=4, deposit_amount=40),
        ]
        series = build_time_series(rows, BUCKET_DAILY, kind=KIND_SUMMARY)
        assert [p['depositAmount'] for p in series] == [25, 40]

    def test_empty_rows(self):
        assert build_time_series([], BUCKET_WEEKLY) == []

    def test_unknown_bucket_raises(self, rows):
        with pytest.raises(ValidationError):
            build_time_series(rows, 'yearly')


def test_to_chart_series(rows):
    series = build_time_series(rows, BUCKET_MONTHLY)
    chart = to_chart_series(series, 'depositCases', 'Deposit Cases')

    assert chart == {
        'series': [{'name': 'Deposit Cases', 'data': [3, 2]}],
        'categories': ['2025-01', '2025-02'],
    }
