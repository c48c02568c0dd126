"""
Models package - SQLAlchemy models
"""
from models.database import db
from models.transaction import Deposit, Withdraw
from models.summary import (
    MemberReportDaily,
    MyrMember,
    MyrSummary,
    SgdMember,
    SgdSummary,
    UscMember,
    UscSummary,
)
from models.target import BPTarget, BPTargetAuditLog

__all__ = [
    'db',
    'Deposit',
    'Withdraw',
    'MyrSummary',
    'SgdSummary',
    'UscSummary',
    'MyrMember',
    'SgdMember',
    'UscMember',
    'MemberReportDaily',
    'BPTarget',
    'BPTargetAuditLog',
]
