import csv
import io

from services.export_service import (
    brand_comparison_to_csv,
    comparison_to_csv,
    snapshots_to_csv,
)
from services.kpi.base import KPISnapshot
from services.kpi.comparator import compare_snapshots
from services.kpi.registry import COMPARISON_METRICS, get_metric


def _parse(content):
    return list(csv.reader(io.StringIO(content)))


def test_comparison_csv_header_and_rows():
    rows = compare_snapshots(
        KPISnapshot(deposit_amount=1500.0), KPISnapshot(deposit_amount=1000.0),
        [get_metric('depositAmount')],
    )
    parsed = _parse(comparison_to_csv(rows))

    assert parsed[0] == ['Metric', 'Period A', 'Period B', 'Difference', 'Percentage Change (%)']
    assert parsed[1] == ['Deposit Amount', '1500.0', '1000.0', '-500.0', '-33.33']


def test_comparison_csv_with_line_column():
    rows = compare_snapshots(KPISnapshot(), KPISnapshot())
    parsed = _parse(comparison_to_csv(rows, line='ABC'))

    assert parsed[0][0] == 'Line'
    assert len(parsed) == 1 + len(COMPARISON_METRICS)
    assert all(row[0] == 'ABC' for row in parsed[1:])


def test_brand_comparison_csv():
    comparison = compare_snapshots(KPISnapshot(), KPISnapshot(), [get_metric('activeMember')])
    results = [
        {'line': 'ALL', 'comparison': comparison},
        {'line': 'ABC', 'comparison': comparison},
    ]
    parsed = _parse(brand_comparison_to_csv(results))

    assert [row[0] for row in parsed[1:]] == ['ALL', 'ABC']
    assert parsed[1][1] == 'Active Member'


def test_snapshots_csv():
    metrics = [get_metric('depositCases'), get_metric('winrate')]
    content = snapshots_to_csv({
        'ALL': KPISnapshot(deposit_cases=3, winrate=12.346),
        'ABC': KPISnapshot(deposit_cases=1),
    }, metrics)
    parsed = _parse(content)

    assert parsed[0] == ['Line', 'Deposit Cases', 'Winrate']
    assert parsed[1] == ['ALL', '3', '12.35']
    assert parsed[2] == ['ABC', '1', '0.0']


def test_comparison_csv_formatted_for_display():
    rows = compare_snapshots(
        KPISnapshot(deposit_amount=1500.0, active_member=1200),
        KPISnapshot(deposit_amount=1000.0, active_member=1200),
        [get_metric('depositAmount'), get_metric('activeMember')],
    )
    parsed = _parse(comparison_to_csv(rows, currency='MYR'))

    assert parsed[1] == ['Deposit Amount', 'RM 1.50K', 'RM 1.00K', 'RM -500.00', '-33.33%']
    assert parsed[2] == ['Active Member', '1,200', '1,200', '0', '0.00%']


def test_brand_comparison_csv_formatted_for_display():
    comparison = compare_snapshots(
        KPISnapshot(deposit_amount=2_000_000.0), KPISnapshot(deposit_amount=1_000_000.0),
        [get_metric('depositAmount')],
    )
    parsed = _parse(brand_comparison_to_csv([{'line': 'ABC', 'comparison': comparison}], currency='USC'))

    assert parsed[1] == ['ABC', 'Deposit Amount', 'USD 2.00M', 'USD 1.00M', 'USD -1.00M', '-50.00%']
