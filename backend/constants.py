"""
Centralized Constants - SINGLE SOURCE OF TRUTH

Currency regions, table names, month ordering and role names used across the
KPI services and routes. Import from here; do not redefine elsewhere.
"""

# =============================================================================
# CURRENCY REGIONS
# =============================================================================

CURRENCY_MYR = 'MYR'
CURRENCY_SGD = 'SGD'
CURRENCY_USC = 'USC'

CURRENCIES = [CURRENCY_MYR, CURRENCY_SGD, CURRENCY_USC]

# Display symbol per currency (USC is reported in US dollars)
CURRENCY_SYMBOLS = {
    CURRENCY_MYR: 'RM',
    CURRENCY_SGD: 'SGD',
    CURRENCY_USC: 'USD',
}
DEFAULT_CURRENCY_SYMBOL = 'RM'


def normalize_currency(currency) -> str:
    """Uppercase and strip a currency code ('myr ' -> 'MYR')."""
    return str(currency or '').strip().upper()


def is_valid_currency(currency) -> bool:
    return normalize_currency(currency) in CURRENCIES


# =============================================================================
# LINE / BRAND
# =============================================================================

# Slicer sentinel meaning "every brand the caller may see"
LINE_ALL = 'ALL'


def is_all_lines(line) -> bool:
    return line is None or str(line).strip() == '' or str(line).strip().upper() == LINE_ALL


# =============================================================================
# TABLES
# =============================================================================

TABLE_DEPOSIT = 'deposit'
TABLE_WITHDRAW = 'withdraw'
TABLE_MEMBER_REPORT_DAILY = 'member_report_daily'

# Transaction-level tables (one row per deposit/withdraw event)
TRANSACTION_TABLES = [TABLE_DEPOSIT, TABLE_WITHDRAW]


def summary_table_for(currency: str) -> str:
    """Pre-aggregated brand/day table, e.g. blue_whale_myr_summary."""
    return f"blue_whale_{normalize_currency(currency).lower()}_summary"


def member_table_for(currency: str) -> str:
    """Member/day table used for active member counts, e.g. blue_whale_myr."""
    return f"blue_whale_{normalize_currency(currency).lower()}"


SUMMARY_TABLES = [summary_table_for(c) for c in CURRENCIES]
MEMBER_TABLES = [member_table_for(c) for c in CURRENCIES] + [TABLE_MEMBER_REPORT_DAILY]


# =============================================================================
# MONTHS
# =============================================================================

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]


def month_index(month_name) -> int:
    """1-based month number for a month name, 0 if unknown."""
    try:
        return MONTH_NAMES.index(str(month_name).strip().capitalize()) + 1
    except ValueError:
        return 0


def sort_month_names(months):
    """Sort month names chronologically; unknown names go last."""
    return sorted(months, key=lambda m: month_index(m) or 13)


QUARTERS = ['Q1', 'Q2', 'Q3', 'Q4']


# =============================================================================
# ROLES
# =============================================================================

ROLE_ADMIN = 'admin'
MANAGER_ROLE_PREFIX = 'manager_'
TARGET_EDITOR_ROLES = [ROLE_ADMIN] + [f"{MANAGER_ROLE_PREFIX}{c.lower()}" for c in CURRENCIES]


def month_date_range_key(year, month_name) -> str:
    """Key used by slicer monthDateRanges, e.g. '2025-September'."""
    return f"{year}-{month_name}"
