"""
Period Comparator Tests

compare() sign policy, per-metric comparison rows and the per-brand
comparison with its ALL total.
"""
import pytest

from constants import LINE_ALL
from services.kpi.base import KPISnapshot, SummaryRow
from services.kpi.comparator import (
    COLOR_BAD,
    COLOR_GOOD,
    COLOR_NEUTRAL,
    change_color,
    compare,
    compare_brands,
    compare_snapshots,
)
from services.kpi.registry import COMPARISON_METRICS, get_metric, list_metric_keys


class TestCompare:

    @pytest.mark.parametrize("a,b,expected", [
        (0, 0, 0),
        (0, 50, 100),
        (0, -50, -100),
        (-100, 50, 150),
        (-100, -50, 50),
        (-100, -150, -50),
        (100, 50, -50),
    ])
    def test_percentage_change_policy(self, a, b, expected):
        assert compare(a, b).percentage_change == pytest.approx(expected)

    @pytest.mark.parametrize("a,b", [
        (0, 0), (10, 25), (-40, 12.5), (1e6, -3), (0.1, 0.2),
    ])
    def test_difference_symmetry(self, a, b):
        assert compare(a, b).difference == -compare(b, a).difference

    def test_none_counts_as_zero(self):
        result = compare(None, 25)
        assert result.period_a == 0
        assert result.difference == 25
        assert result.percentage_change == 100

    def test_to_dict_rounds(self):
        data = compare(3, 4).to_dict()
        assert data == {'periodA': 3, 'periodB': 4, 'difference': 1, 'percentageChange': 33.33}


class TestChangeColor:

    def test_regular_metric(self):
        assert change_color(5) == COLOR_GOOD
        assert change_color(-5) == COLOR_BAD
        assert change_color(0) == COLOR_NEUTRAL

    def test_inverse_metric_flips(self):
        assert change_color(5, inverse=True) == COLOR_BAD
        assert change_color(-5, inverse=True) == COLOR_GOOD


class TestCompareSnapshots:

    def test_rows_follow_registry_order(self):
        rows = compare_snapshots(KPISnapshot(), KPISnapshot())
        assert [row['metricKey'] for row in rows] == list_metric_keys()
        assert all(row['percentageChange'] == 0 for row in rows)
        assert all(row['color'] == COLOR_NEUTRAL for row in rows)

    def test_withdraw_increase_is_red(self):
        rows = compare_snapshots(KPISnapshot(withdraw_amount=100), KPISnapshot(withdraw_amount=150))
        row = next(r for r in rows if r['metricKey'] == 'withdrawAmount')

        assert row['inverse'] is True
        assert row['difference'] == 50
        assert row['percentageChange'] == 50
        assert row['color'] == COLOR_BAD

    def test_metric_subset(self):
        metrics = [get_metric('depositAmount')]
        rows = compare_snapshots(KPISnapshot(deposit_amount=1500), KPISnapshot(deposit_amount=1000), metrics)

        assert len(rows) == 1
        assert rows[0]['metric'] == 'Deposit Amount'
        assert rows[0]['type'] == 'amount'
        assert rows[0]['percentageChange'] == -33.33


class TestCompareBrands:

    @pytest.fixture
    def rows(self):
        rows_a = [
            SummaryRow(line='ABC', deposit_amount=100, deposit_cases=1),
            SummaryRow(line='XYZ', deposit_amount=300, deposit_cases=3),
            SummaryRow(line='HIDDEN', deposit_amount=9999, deposit_cases=9),
        ]
        rows_b = [
            SummaryRow(line='ABC', deposit_amount=200, deposit_cases=2),
            SummaryRow(line='XYZ', deposit_amount=150, deposit_cases=1),
        ]
        return rows_a, rows_b

    @staticmethod
    def _metric(result, key):
        return next(row for row in result['comparison'] if row['metricKey'] == key)

    def test_all_row_compares_totals(self, rows):
        rows_a, rows_b = rows
        results = compare_brands(rows_a, rows_b, ['ABC', 'XYZ'])

        assert [r['line'] for r in results] == [LINE_ALL, 'ABC', 'XYZ']
        total = self._metric(results[0], 'depositAmount')
        assert total['periodA'] == 400
        assert total['periodB'] == 350
        assert total['percentageChange'] == -12.5

    def test_per_brand_rows(self, rows):
        rows_a, rows_b = rows
        results = compare_brands(rows_a, rows_b, ['ABC', 'XYZ'])

        abc = self._metric(results[1], 'depositAmount')
        xyz = self._metric(results[2], 'depositAmount')
        assert abc['percentageChange'] == 100
        assert xyz['percentageChange'] == -50

    def test_total_is_not_average_of_brand_changes(self, rows):
        rows_a, rows_b = rows
        results = compare_brands(rows_a, rows_b, ['ABC', 'XYZ'])

        total = self._metric(results[0], 'depositAmount')['percentageChange']
        brand_mean = (100 + -50) / 2
        assert total != brand_mean

    def test_brands_outside_list_are_ignored(self, rows):
        rows_a, rows_b = rows
        results = compare_brands(rows_a, rows_b, ['ABC'])

        assert [r['line'] for r in results] == [LINE_ALL, 'ABC']
        assert self._metric(results[0], 'depositAmount')['periodA'] == 100


def test_registry_keys_exist_on_snapshot():
    snapshot = KPISnapshot().to_dict()
    assert all(metric.key in snapshot for metric in COMPARISON_METRICS)
