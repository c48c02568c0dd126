"""
Business Performance Target Models

bp_target holds one active row per (currency, line, year, quarter).
bp_target_audit_log keeps one row per changed field on every save.
"""
from datetime import datetime

from models.database import db

# Target fields a manager can edit (audit log field_name values)
TARGET_FIELDS = [
    'target_ggr',
    'target_deposit_amount',
    'target_deposit_cases',
    'target_active_member',
    'forecast_ggr',
]


class BPTarget(db.Model):
    __tablename__ = 'bp_target'
    __table_args__ = (
        db.UniqueConstraint('currency', 'line', 'year', 'quarter', name='uq_bp_target_period'),
    )

    id = db.Column(db.Integer, primary_key=True)
    currency = db.Column(db.String(10), nullable=False, index=True)
    line = db.Column(db.String(50), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.String(2), nullable=False)

    target_ggr = db.Column(db.Float, default=0)
    target_deposit_amount = db.Column(db.Float, default=0)
    target_deposit_cases = db.Column(db.Integer, default=0)
    target_active_member = db.Column(db.Integer, default=0)
    forecast_ggr = db.Column(db.Float, default=0)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(db.String(255))
    updated_by = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'currency': self.currency,
            'line': self.line,
            'year': self.year,
            'quarter': self.quarter,
            'targetGgr': self.target_ggr or 0,
            'targetDepositAmount': self.target_deposit_amount or 0,
            'targetDepositCases': self.target_deposit_cases or 0,
            'targetActiveMember': self.target_active_member or 0,
            'forecastGgr': self.forecast_ggr or 0,
            'updatedBy': self.updated_by,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class BPTargetAuditLog(db.Model):
    __tablename__ = 'bp_target_audit_log'

    id = db.Column(db.Integer, primary_key=True)
    target_id = db.Column(db.Integer, db.ForeignKey('bp_target.id'), index=True)
    currency = db.Column(db.String(10), nullable=False, index=True)
    line = db.Column(db.String(50), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.String(2), nullable=False)
    action = db.Column(db.String(10), nullable=False)  # 'CREATE' or 'UPDATE'
    field_name = db.Column(db.String(50), nullable=False)
    old_value = db.Column(db.Float)
    new_value = db.Column(db.Float)
    changed_by = db.Column(db.String(255))
    role = db.Column(db.String(50))
    reason = db.Column(db.Text)
    changed_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'targetId': self.target_id,
            'currency': self.currency,
            'line': self.line,
            'year': self.year,
            'quarter': self.quarter,
            'action': self.action,
            'fieldName': self.field_name,
            'oldValue': self.old_value,
            'newValue': self.new_value,
            'changedBy': self.changed_by,
            'role': self.role,
            'reason': self.reason,
            'changedAt': self.changed_at.isoformat() if self.changed_at else None,
        }
