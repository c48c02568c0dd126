"""
Transaction Models - one row per deposit or withdraw event

Tables are written by the upstream ingestion job and are read-only here.

  Column           Notes
  ─────────────────────────────────────────────────────────────
  date / time      Event date and 'HH:MM:SS' wall-clock time
  year / month     Denormalized slicer columns ('September', not 9)
  line             Brand code
  operator_group   'Automation' / 'BOT' / 'Staff' / 'User' / 'Manual' / other
  proc_sec         Processing latency in seconds, NULL when not captured
  userkey          Member key (nullable on older rows)
"""
from models.database import db


class TransactionColumnsMixin:
    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, index=True, nullable=False)
    time = db.Column(db.String(8))
    year = db.Column(db.Integer, index=True)
    month = db.Column(db.String(20), index=True)
    line = db.Column(db.String(50), index=True)
    currency = db.Column(db.String(10), index=True, nullable=False)
    amount = db.Column(db.Float, default=0)
    operator_group = db.Column(db.String(50))
    proc_sec = db.Column(db.Float)
    status = db.Column(db.String(50))
    userkey = db.Column(db.String(100), index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat() if self.date else None,
            'time': self.time,
            'year': self.year,
            'month': self.month,
            'line': self.line,
            'currency': self.currency,
            'amount': self.amount,
            'operator_group': self.operator_group,
            'proc_sec': self.proc_sec,
            'status': self.status,
            'userkey': self.userkey,
        }


class Deposit(TransactionColumnsMixin, db.Model):
    __tablename__ = 'deposit'


class Withdraw(TransactionColumnsMixin, db.Model):
    __tablename__ = 'withdraw'
