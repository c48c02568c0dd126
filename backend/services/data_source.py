"""
Raw Aggregation Fetcher - range-filtered reads against the KPI tables.

Every query is built from a QueryFilter via build_sqlalchemy_filters(), so
brand scoping and date addressing behave the same for every table.

Tables:
    deposit, withdraw                       -> TransactionRow
    blue_whale_{myr,sgd,usc}_summary        -> SummaryRow (brand/day)
    blue_whale_{myr,sgd,usc}                -> SummaryRow (member/day)
    member_report_daily                     -> SummaryRow (member/day)

Errors:
    unknown table / column   -> ValidationError (before any query)
    SQLAlchemyError          -> DataSourceError (logged, session rolled back)
    no matching rows         -> [] / None, never an error
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from constants import month_date_range_key, month_index
from models.database import db
from models.summary import (
    MemberReportDaily,
    MyrMember,
    MyrSummary,
    SgdMember,
    SgdSummary,
    UscMember,
    UscSummary,
)
from models.transaction import Deposit, Withdraw
from services.kpi.base import SummaryRow, TransactionRow
from utils.filter_builder import QueryFilter, build_sqlalchemy_filters
from utils.normalize import ValidationError, coerce_to_date

logger = logging.getLogger('kpi.data_source')


class DataSourceError(RuntimeError):
    """Underlying query or connection failure. Maps to HTTP 500."""

    def __init__(self, message: str, table: str = None):
        super().__init__(message)
        self.table = table


TABLE_MODELS = {
    'deposit': Deposit,
    'withdraw': Withdraw,
    'blue_whale_myr_summary': MyrSummary,
    'blue_whale_sgd_summary': SgdSummary,
    'blue_whale_usc_summary': UscSummary,
    'blue_whale_myr': MyrMember,
    'blue_whale_sgd': SgdMember,
    'blue_whale_usc': UscMember,
    'member_report_daily': MemberReportDaily,
}

TRANSACTION_MODELS = (Deposit, Withdraw)

# Columns callers may ask distinct values for
DISTINCT_COLUMNS = ('line', 'year', 'month', 'currency', 'operator_group')


def get_model(table: str):
    model = TABLE_MODELS.get(table)
    if model is None:
        raise ValidationError(
            f"Unknown table: {table!r}. Expected one of {sorted(TABLE_MODELS)}",
            field='table',
            received_value=table,
        )
    return model


def is_transaction_table(table: str) -> bool:
    return get_model(table) in TRANSACTION_MODELS


# =============================================================================
# ROW MAPPING
# =============================================================================

def _to_transaction_row(record, table: str) -> TransactionRow:
    if record.proc_sec is not None and record.proc_sec < 0:
        raise DataSourceError(
            f"Negative proc_sec ({record.proc_sec}) in {table} row id={record.id}",
            table=table,
        )
    return TransactionRow(
        date=coerce_to_date(record.date),
        time=record.time,
        year=record.year,
        month=record.month,
        line=record.line,
        currency=record.currency,
        amount=float(record.amount or 0),
        operator_group=record.operator_group,
        proc_sec=float(record.proc_sec) if record.proc_sec is not None else None,
        status=record.status,
        user_key=record.userkey,
    )


def _to_summary_row(record) -> SummaryRow:
    return SummaryRow(
        date=coerce_to_date(record.date),
        line=record.line,
        currency=record.currency,
        deposit_cases=int(record.deposit_cases or 0),
        deposit_amount=float(record.deposit_amount or 0),
        withdraw_cases=int(record.withdraw_cases or 0),
        withdraw_amount=float(record.withdraw_amount or 0),
        add_transaction=float(record.add_transaction or 0),
        deduct_transaction=float(record.deduct_transaction or 0),
        add_bonus=float(record.add_bonus or 0),
        deduct_bonus=float(record.deduct_bonus or 0),
        new_register=int(getattr(record, 'new_register', 0) or 0),
        new_depositor=int(getattr(record, 'new_depositor', 0) or 0),
        user_key=getattr(record, 'userkey', None),
        unique_code=getattr(record, 'unique_code', None),
    )


def _to_row(model, record, table: str):
    if model in TRANSACTION_MODELS:
        return _to_transaction_row(record, table)
    return _to_summary_row(record)


def _execute(stmt, table: str):
    try:
        return db.session.execute(stmt)
    except SQLAlchemyError as e:
        logger.error("query_failed table=%s error=%s", table, e, exc_info=True)
        db.session.rollback()
        raise DataSourceError(f"Query against {table} failed", table=table) from e


# =============================================================================
# FETCHERS
# =============================================================================

def fetch_rows(table: str, qf: QueryFilter) -> List:
    """
    All rows of `table` matching `qf`, ordered by date.

    Returns TransactionRow for deposit/withdraw, SummaryRow otherwise.
    """
    model = get_model(table)
    stmt = (
        select(model)
        .where(*build_sqlalchemy_filters(model, qf))
        .order_by(model.date, model.id)
    )
    records = _execute(stmt, table).scalars().all()
    rows = [_to_row(model, record, table) for record in records]
    logger.debug("fetch_rows table=%s currency=%s line=%s rows=%d", table, qf.currency, qf.line, len(rows))
    return rows


def fetch_distinct(table: str, column: str, qf: QueryFilter) -> List[Any]:
    """Sorted distinct non-null values of `column`."""
    if column not in DISTINCT_COLUMNS:
        raise ValidationError(f"Column {column!r} is not selectable", field='column', received_value=column)
    model = get_model(table)
    attr = getattr(model, column, None)
    if attr is None:
        raise ValidationError(f"Table {table!r} has no column {column!r}", field='column', received_value=column)
    stmt = (
        select(attr)
        .where(*build_sqlalchemy_filters(model, qf))
        .where(attr.isnot(None))
        .distinct()
    )
    values = _execute(stmt, table).scalars().all()
    return sorted(values)


def fetch_month_date_ranges(table: str, qf: QueryFilter) -> Dict[str, Dict[str, str]]:
    """
    Earliest and latest date per (year, month) with data.

    Returns:
        {'2025-September': {'min': '2025-09-01', 'max': '2025-09-30'}, ...}
        ordered chronologically
    """
    model = get_model(table)
    stmt = (
        select(model.year, model.month, func.min(model.date), func.max(model.date))
        .where(*build_sqlalchemy_filters(model, qf))
        .where(model.year.isnot(None), model.month.isnot(None))
        .group_by(model.year, model.month)
    )
    groups = _execute(stmt, table).all()
    groups = sorted(groups, key=lambda g: (g[0], month_index(g[1])))

    ranges = {}
    for year, month, min_date, max_date in groups:
        ranges[month_date_range_key(year, month)] = {
            'min': coerce_to_date(min_date).isoformat(),
            'max': coerce_to_date(max_date).isoformat(),
        }
    return ranges


def fetch_latest_row(table: str, qf: QueryFilter):
    """Most recent row (by date, then id) matching `qf`, or None."""
    model = get_model(table)
    stmt = (
        select(model)
        .where(*build_sqlalchemy_filters(model, qf))
        .order_by(model.date.desc(), model.id.desc())
        .limit(1)
    )
    record = _execute(stmt, table).scalars().first()
    return _to_row(model, record, table) if record is not None else None


def fetch_max_date(table: str, qf: QueryFilter) -> Optional[date]:
    model = get_model(table)
    stmt = select(func.max(model.date)).where(*build_sqlalchemy_filters(model, qf))
    return coerce_to_date(_execute(stmt, table).scalar())
