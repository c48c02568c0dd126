import math

import pytest

from services.formatting import (
    currency_symbol,
    format_change,
    format_currency,
    format_integer,
    format_metric,
    format_numeric,
    format_percentage,
)


@pytest.mark.parametrize("currency,symbol", [
    ('MYR', 'RM'), ('sgd', 'SGD'), ('USC', 'USD'), ('EUR', 'RM'), (None, 'RM'),
])
def test_currency_symbol(currency, symbol):
    assert currency_symbol(currency) == symbol


@pytest.mark.parametrize("value,expected", [
    (1234.5, '1.23K'),
    (999.999, '1,000.00'),
    (2_500_000, '2.50M'),
    (-1500, '-1.50K'),
    (12.3, '12.30'),
    (None, '0.00'),
    (math.nan, '0.00'),
])
def test_format_numeric(value, expected):
    assert format_numeric(value) == expected


def test_format_currency():
    assert format_currency(-1_500_000, 'MYR') == 'RM -1.50M'
    assert format_currency(1234.5, 'SGD') == 'SGD 1.23K'
    assert format_currency(None, 'MYR') == '0.00'


def test_format_integer():
    assert format_integer(12345.6) == '12,346'
    assert format_integer(None) == '0'


def test_format_percentage_and_change():
    assert format_percentage(12.346) == '12.35%'
    assert format_change(4.2) == '+4.20%'
    assert format_change(-4.2) == '-4.20%'
    assert format_change(0) == '0.00%'
    assert format_change(None) == '0.00%'


def test_format_metric_by_type():
    assert format_metric(3, 'integer') == '3'
    assert format_metric(66.666, 'percentage') == '66.67%'
    assert format_metric(1500, 'amount', 'USC') == 'USD 1.50K'
    assert format_metric(1500, 'amount') == '1.50K'
    assert format_metric(2.5, 'decimal') == '2.50'
