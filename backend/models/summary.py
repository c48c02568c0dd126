"""
Pre-aggregated Models

- blue_whale_{cur}_summary: one row per brand per day (authoritative period totals)
- blue_whale_{cur}:         one row per member per brand per day (active members)
- member_report_daily:      cross-currency member/day report (churn populations)

Cases and amounts are never negative; NULLs are treated as zero when read.
"""
from models.database import db


class PeriodColumnsMixin:
    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, index=True, nullable=False)
    year = db.Column(db.Integer, index=True)
    month = db.Column(db.String(20), index=True)
    line = db.Column(db.String(50), index=True)
    currency = db.Column(db.String(10), index=True, nullable=False)


class AmountColumnsMixin:
    deposit_cases = db.Column(db.Integer, default=0)
    deposit_amount = db.Column(db.Float, default=0)
    withdraw_cases = db.Column(db.Integer, default=0)
    withdraw_amount = db.Column(db.Float, default=0)
    add_transaction = db.Column(db.Float, default=0)
    deduct_transaction = db.Column(db.Float, default=0)
    add_bonus = db.Column(db.Float, default=0)
    deduct_bonus = db.Column(db.Float, default=0)


class SummaryColumnsMixin(PeriodColumnsMixin, AmountColumnsMixin):
    new_register = db.Column(db.Integer, default=0)
    new_depositor = db.Column(db.Integer, default=0)


class MemberColumnsMixin(PeriodColumnsMixin, AmountColumnsMixin):
    userkey = db.Column(db.String(100), index=True)
    unique_code = db.Column(db.String(100))


class MyrSummary(SummaryColumnsMixin, db.Model):
    __tablename__ = 'blue_whale_myr_summary'


class SgdSummary(SummaryColumnsMixin, db.Model):
    __tablename__ = 'blue_whale_sgd_summary'


class UscSummary(SummaryColumnsMixin, db.Model):
    __tablename__ = 'blue_whale_usc_summary'


class MyrMember(MemberColumnsMixin, db.Model):
    __tablename__ = 'blue_whale_myr'


class SgdMember(MemberColumnsMixin, db.Model):
    __tablename__ = 'blue_whale_sgd'


class UscMember(MemberColumnsMixin, db.Model):
    __tablename__ = 'blue_whale_usc'


class MemberReportDaily(MemberColumnsMixin, db.Model):
    __tablename__ = 'member_report_daily'
