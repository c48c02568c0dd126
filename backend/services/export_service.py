"""
CSV export of comparison rows and KPI snapshots.

Every export writes a header row followed by data rows in a fixed column
order. Values are the same numbers the JSON endpoints return; comparison
exports given a currency render them for display instead
('RM 1.50K', '-33.33%').
"""

import csv
import io
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from services.formatting import format_change, format_metric
from services.kpi.base import KPISnapshot
from services.kpi.registry import COMPARISON_METRICS, MetricSpec

COMPARISON_COLUMNS = [
    ('metric', 'Metric'),
    ('periodA', 'Period A'),
    ('periodB', 'Period B'),
    ('difference', 'Difference'),
    ('percentageChange', 'Percentage Change (%)'),
]


def _write(header: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def _comparison_cells(row: Mapping, currency: Optional[str]) -> List:
    if currency is None:
        return [row.get(key, '') for key, _ in COMPARISON_COLUMNS]
    value_type = row.get('type')
    return [
        row.get('metric', ''),
        format_metric(row.get('periodA'), value_type, currency),
        format_metric(row.get('periodB'), value_type, currency),
        format_metric(row.get('difference'), value_type, currency),
        format_change(row.get('percentageChange')),
    ]


def comparison_to_csv(rows: Iterable[Mapping], line: str = None, currency: Optional[str] = None) -> str:
    """
    Render compare_snapshots() rows as CSV.

    With `line`, a leading Line column repeats it on every row. With
    `currency`, values are formatted for display by metric type.
    """
    header = [label for _, label in COMPARISON_COLUMNS]
    if line is not None:
        header = ['Line'] + header

    def cells(row):
        values = _comparison_cells(row, currency)
        return [line] + values if line is not None else values

    return _write(header, (cells(row) for row in rows))


def brand_comparison_to_csv(results: Iterable[Mapping], currency: Optional[str] = None) -> str:
    """Render compare_brands() output: one block of metric rows per line."""
    header = ['Line'] + [label for _, label in COMPARISON_COLUMNS]
    return _write(header, (
        [result['line']] + _comparison_cells(row, currency)
        for result in results
        for row in result['comparison']
    ))


def snapshots_to_csv(
    snapshots_by_line: Dict[str, KPISnapshot],
    metrics: Sequence[MetricSpec] = COMPARISON_METRICS,
) -> str:
    """One row per line, one column per metric (rounded like the JSON output)."""
    header = ['Line'] + [metric.label for metric in metrics]
    rows = []
    for line, snapshot in snapshots_by_line.items():
        values = snapshot.to_dict()
        rows.append([line] + [values.get(metric.key, 0) for metric in metrics])
    return _write(header, rows)
