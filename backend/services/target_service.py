"""
Business performance targets with an audit trail.

One active bp_target row per (currency, line, year, quarter). save_target()
inserts or updates it and writes one bp_target_audit_log row per changed
field, all in a single transaction.

Permissions:
    admin          -> every currency
    manager_<cur>  -> its own currency only

achievement_rows() compares period actuals with the quarter's targets and
bands each metric: On Track, Behind, Risk, or N/A when no target is set.
"""

import logging
from typing import Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from constants import QUARTERS, normalize_currency
from models.database import db
from models.target import TARGET_FIELDS, BPTarget, BPTargetAuditLog
from services.brand_access import UNRESTRICTED, BrandAccessError, CallerContext, can_edit_currency
from services.data_source import DataSourceError
from services.kpi.base import KPISnapshot, safe_div
from utils.normalize import ValidationError

logger = logging.getLogger('analytics.targets')

ACTION_CREATE = 'CREATE'
ACTION_UPDATE = 'UPDATE'


def _check_period(year, quarter: str) -> None:
    if quarter not in QUARTERS:
        raise ValidationError(f"Unknown quarter: {quarter!r}", field='quarter', received_value=quarter)
    if not isinstance(year, int):
        raise ValidationError(f"Expected int year, got {year!r}", field='year', received_value=year)


def list_targets(
    currency: str,
    year: Optional[int] = None,
    quarter: Optional[str] = None,
    caller: CallerContext = UNRESTRICTED,
) -> List[Dict]:
    """Active targets for a currency, restricted to the caller's brands."""
    query = BPTarget.query.filter_by(currency=normalize_currency(currency), is_active=True)
    if year is not None:
        query = query.filter_by(year=year)
    if quarter is not None:
        query = query.filter_by(quarter=quarter)
    if caller.is_restricted:
        query = query.filter(BPTarget.line.in_(caller.allowed_brands))
    targets = query.order_by(BPTarget.year, BPTarget.quarter, BPTarget.line).all()
    return [target.to_dict() for target in targets]


def get_target(currency: str, line: str, year: int, quarter: str) -> Optional[BPTarget]:
    return BPTarget.query.filter_by(
        currency=normalize_currency(currency),
        line=line,
        year=year,
        quarter=quarter,
        is_active=True,
    ).first()


def save_target(payload: Mapping, caller: CallerContext, changed_by: Optional[str] = None) -> Dict:
    """
    Create or update a target and audit every changed field.

    Args:
        payload: currency, line, year, quarter, any of TARGET_FIELDS, reason
        caller: must be admin or the currency's manager
        changed_by: actor recorded on the audit rows

    Returns:
        {'action': 'CREATE'|'UPDATE', 'changedFields': [...], 'target': {...}}

    Raises:
        BrandAccessError: caller may not edit this currency
        DataSourceError: write failed (transaction rolled back)
    """
    currency = normalize_currency(payload.get('currency'))
    line = payload.get('line')
    year = payload.get('year')
    quarter = payload.get('quarter')
    if not currency or not line or year is None or not quarter:
        raise ValidationError("currency, line, year and quarter are required", field='currency')
    _check_period(year, quarter)

    if not can_edit_currency(caller, currency):
        logger.warning("target_edit_denied role=%s currency=%s", caller.role, currency)
        raise BrandAccessError(f"Role {caller.role!r} cannot edit {currency} targets")

    try:
        target = get_target(currency, line, year, quarter)
        action = ACTION_UPDATE if target is not None else ACTION_CREATE
        if target is None:
            target = BPTarget(
                currency=currency, line=line, year=year, quarter=quarter,
                created_by=changed_by,
            )
            db.session.add(target)

        changes = []
        for field_name in TARGET_FIELDS:
            new_value = payload.get(field_name)
            if new_value is None:
                continue
            old_value = getattr(target, field_name)
            if old_value is not None and float(old_value) == float(new_value):
                continue
            setattr(target, field_name, new_value)
            changes.append((field_name, old_value, new_value))

        target.updated_by = changed_by
        db.session.flush()

        for field_name, old_value, new_value in changes:
            db.session.add(BPTargetAuditLog(
                target_id=target.id,
                currency=currency,
                line=line,
                year=year,
                quarter=quarter,
                action=action,
                field_name=field_name,
                old_value=old_value,
                new_value=new_value,
                changed_by=changed_by,
                role=caller.role,
                reason=payload.get('reason'),
            ))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("target_save_failed currency=%s line=%s error=%s", currency, line, e, exc_info=True)
        raise DataSourceError("Failed to save target", table=BPTarget.__tablename__) from e

    logger.info(
        "target_saved action=%s currency=%s line=%s period=%s-%s fields=%d",
        action, currency, line, year, quarter, len(changes),
    )
    return {
        'action': action,
        'changedFields': [name for name, _, _ in changes],
        'target': target.to_dict(),
    }


def list_audit_log(currency: Optional[str] = None, limit: int = 100) -> List[Dict]:
    query = BPTargetAuditLog.query
    if currency:
        query = query.filter_by(currency=normalize_currency(currency))
    entries = (
        query.order_by(BPTargetAuditLog.changed_at.desc(), BPTargetAuditLog.id.desc())
        .limit(limit)
        .all()
    )
    return [entry.to_dict() for entry in entries]


def target_achievement(actual, target) -> float:
    """Percent of target reached; 0 when there is no target."""
    return safe_div(actual, target) * 100


# =============================================================================
# ACHIEVEMENT
# =============================================================================

STATUS_ON_TRACK = 'On Track'
STATUS_BEHIND = 'Behind'
STATUS_RISK = 'Risk'
STATUS_NO_TARGET = 'N/A'

# (response key, KPISnapshot attribute, bp_target column)
ACHIEVEMENT_METRICS = (
    ('grossGamingRevenue', 'gross_gaming_revenue', 'target_ggr'),
    ('depositCases', 'deposit_cases', 'target_deposit_cases'),
    ('depositAmount', 'deposit_amount', 'target_deposit_amount'),
    ('activeMember', 'active_member', 'target_active_member'),
)


def achievement_status(percentage: Optional[float]) -> str:
    """On Track >= 90%, Behind 70-89%, Risk < 70%, N/A without a target."""
    if percentage is None:
        return STATUS_NO_TARGET
    if percentage >= 90:
        return STATUS_ON_TRACK
    if percentage >= 70:
        return STATUS_BEHIND
    return STATUS_RISK


def _metric_cell(current, target: Optional[float]) -> Dict:
    percentage = target_achievement(current, target) if target else None
    return {
        'current': round(current or 0, 2),
        'target': round(target, 2) if target else None,
        'percentage': round(percentage, 2) if percentage is not None else None,
        'status': achievement_status(percentage),
    }


def achievement_rows(
    currency: str,
    year: int,
    quarter: str,
    snapshots: Mapping[str, KPISnapshot],
    total: KPISnapshot,
    ratio: float = 1.0,
) -> List[Dict]:
    """
    Actual vs target per line, plus a currency total row.

    Args:
        snapshots: line -> summary KPISnapshot for the period
        total: snapshot over every line (active members counted once)
        ratio: share of the quarter covered by the period; quarterly targets
               are scaled by it in date-range mode

    Returns:
        [{line, grossGamingRevenue: {current, target, percentage, status}, ...}]
        with the total row last, its line set to the currency.
    """
    currency = normalize_currency(currency)
    _check_period(year, quarter)
    targets = {
        target.line: target
        for target in BPTarget.query.filter_by(
            currency=currency, year=year, quarter=quarter, is_active=True,
        ).all()
    }

    rows = []
    target_totals = {key: 0.0 for key, _, _ in ACHIEVEMENT_METRICS}
    for line, snapshot in snapshots.items():
        target = targets.get(line)
        row = {'line': line}
        for key, attr, column in ACHIEVEMENT_METRICS:
            raw = getattr(target, column) if target is not None else None
            scaled = raw * ratio if raw else None
            target_totals[key] += scaled or 0
            row[key] = _metric_cell(getattr(snapshot, attr), scaled)
        rows.append(row)

    total_row = {'line': currency}
    for key, attr, _ in ACHIEVEMENT_METRICS:
        total_row[key] = _metric_cell(getattr(total, attr), target_totals[key] or None)
    rows.append(total_row)
    return rows
