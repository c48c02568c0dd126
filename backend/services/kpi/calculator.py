"""
KPI Calculator - rows in, KPISnapshot out.

Pure functions: no I/O, no app context, same rows always give the same
snapshot. Two row kinds are supported:

- 'transaction': TransactionRow, one case per row on the given side
  (deposit or withdraw). Drives the automation/latency KPIs.
- 'summary':     SummaryRow, summed column by column. Drives the revenue
  and member KPIs. Active members come from `members` (member-level rows)
  and churn from `previous_members`.

Rates are percentages (0-100). Every ratio goes through safe_div().
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set

from services.kpi.base import KPISnapshot, safe_div
from services.kpi.policy import DEFAULT_POLICY, KPIPolicy
from utils.normalize import ValidationError

KIND_TRANSACTION = 'transaction'
KIND_SUMMARY = 'summary'
KINDS = (KIND_TRANSACTION, KIND_SUMMARY)

SIDE_DEPOSIT = 'deposit'
SIDE_WITHDRAW = 'withdraw'
SIDES = (SIDE_DEPOSIT, SIDE_WITHDRAW)

_SUMMARY_COLUMNS = (
    'deposit_cases', 'deposit_amount', 'withdraw_cases', 'withdraw_amount',
    'add_transaction', 'deduct_transaction', 'add_bonus', 'deduct_bonus',
    'new_register', 'new_depositor',
)


def calculate_kpis(
    rows: Iterable,
    kind: str = KIND_TRANSACTION,
    *,
    side: str = SIDE_DEPOSIT,
    members: Optional[Iterable] = None,
    previous_members: Optional[Iterable] = None,
    policy: KPIPolicy = DEFAULT_POLICY,
) -> KPISnapshot:
    """
    Compute a KPISnapshot from one period's rows.

    Args:
        rows: TransactionRow or SummaryRow instances
        kind: 'transaction' or 'summary'
        side: which case/amount columns transaction rows feed
        members: member-level rows for active/pure counts (summary kind);
            defaults to `rows`
        previous_members: prior period's member rows; enables churn/retention
        policy: thresholds and channel labels

    Raises:
        ValidationError: unknown kind or side
    """
    if kind not in KINDS:
        raise ValidationError(f"Unknown row kind: {kind!r}", field='kind', received_value=kind)
    if side not in SIDES:
        raise ValidationError(f"Unknown side: {side!r}", field='side', received_value=side)

    rows = list(rows)
    snapshot = KPISnapshot()

    if kind == KIND_TRANSACTION:
        _apply_transaction_totals(snapshot, rows, side)
        _apply_automation(snapshot, rows, policy)
        current_keys = _active_keys(rows)
        snapshot.active_member = len(current_keys)
    else:
        _apply_summary_totals(snapshot, rows)
        member_rows = rows if members is None else list(members)
        current_keys = _active_keys(member_rows)
        snapshot.active_member = len(current_keys)
        snapshot.pure_user = len(_pure_codes(member_rows))

    if previous_members is not None:
        _apply_churn(snapshot, current_keys, _active_keys(previous_members))

    _apply_derived(snapshot)
    return snapshot


# =============================================================================
# TOTALS
# =============================================================================

def _apply_transaction_totals(snapshot: KPISnapshot, rows: Sequence, side: str) -> None:
    cases = len(rows)
    amount = sum(row.amount or 0 for row in rows)
    if side == SIDE_DEPOSIT:
        snapshot.deposit_cases = cases
        snapshot.deposit_amount = float(amount)
    else:
        snapshot.withdraw_cases = cases
        snapshot.withdraw_amount = float(amount)


def _apply_summary_totals(snapshot: KPISnapshot, rows: Sequence) -> None:
    for column in _SUMMARY_COLUMNS:
        total = sum(getattr(row, column) or 0 for row in rows)
        current = getattr(snapshot, column)
        setattr(snapshot, column, type(current)(total))


# =============================================================================
# MEMBERS
# =============================================================================

def _is_active(row) -> bool:
    # Transaction rows are cases by construction; summary rows need a deposit
    cases = getattr(row, 'deposit_cases', None)
    return cases is None or cases > 0


def _active_keys(rows: Iterable) -> Set[str]:
    return {row.user_key for row in rows if row.user_key and _is_active(row)}


def _pure_codes(rows: Iterable) -> Set[str]:
    return {row.unique_code for row in rows if getattr(row, 'unique_code', None) and _is_active(row)}


def _apply_churn(snapshot: KPISnapshot, current: Set[str], previous: Set[str]) -> None:
    churned = previous - current
    retained = previous & current
    snapshot.churn_member = len(churned)
    snapshot.churn_rate = safe_div(len(churned), len(previous)) * 100
    snapshot.retention_rate = safe_div(len(retained), len(previous)) * 100


# =============================================================================
# AUTOMATION / LATENCY
# =============================================================================

@dataclass
class _LatencyTally:
    count: int = 0
    total: float = 0.0
    overdue: int = 0

    def add(self, proc_sec: float, policy: KPIPolicy) -> None:
        self.count += 1
        self.total += proc_sec
        if policy.is_overdue(proc_sec):
            self.overdue += 1

    @property
    def average(self) -> float:
        return safe_div(self.total, self.count)


def _apply_automation(snapshot: KPISnapshot, rows: Sequence, policy: KPIPolicy) -> None:
    total_cases = len(rows)
    total_amount = sum(row.amount or 0 for row in rows)

    overall = _LatencyTally()
    automation = _LatencyTally()
    manual = _LatencyTally()
    fast = 0

    for row in rows:
        amount = row.amount or 0
        is_auto = policy.is_automation(row.operator_group)
        is_manual = policy.is_manual(row.operator_group)

        if is_auto:
            snapshot.automation_transactions += 1
            snapshot.automation_amount += amount
        elif is_manual:
            snapshot.manual_transactions += 1
            snapshot.manual_amount += amount

        if row.proc_sec is None:
            continue
        overall.add(row.proc_sec, policy)
        if policy.is_fast(row.proc_sec):
            fast += 1
        if is_auto:
            automation.add(row.proc_sec, policy)
        elif is_manual:
            manual.add(row.proc_sec, policy)

    snapshot.automation_rate = safe_div(snapshot.automation_transactions, total_cases) * 100
    snapshot.manual_rate = safe_div(snapshot.manual_transactions, total_cases) * 100
    snapshot.automation_amount_rate = safe_div(snapshot.automation_amount, total_amount) * 100

    snapshot.overdue_transactions = overall.overdue
    snapshot.automation_overdue = automation.overdue
    snapshot.manual_overdue = manual.overdue
    snapshot.overdue_rate = safe_div(overall.overdue, overall.count) * 100
    snapshot.fast_transactions = fast
    snapshot.fast_processing_rate = safe_div(fast, overall.count) * 100

    snapshot.avg_processing_time = overall.average
    snapshot.avg_processing_time_automation = automation.average
    snapshot.avg_processing_time_manual = manual.average

    # Savings only make sense when both channels have latency samples
    if automation.count and manual.count:
        saved_per_case = manual.average - automation.average
        snapshot.time_saved_hours = saved_per_case * snapshot.automation_transactions / 3600
        snapshot.efficiency_gain = safe_div(saved_per_case, manual.average) * 100


# =============================================================================
# DERIVED
# =============================================================================

def _apply_derived(snapshot: KPISnapshot) -> None:
    s = snapshot
    s.gross_gaming_revenue = s.deposit_amount - s.withdraw_amount
    s.net_profit = (s.deposit_amount + s.add_transaction) - (s.withdraw_amount + s.deduct_transaction)
    s.pure_member = max(0, s.active_member - s.new_depositor)

    s.avg_transaction_value = safe_div(s.deposit_amount, s.deposit_cases)
    s.purchase_frequency = safe_div(s.deposit_cases, s.active_member)
    s.ggr_per_user = safe_div(s.net_profit, s.active_member)
    s.deposit_amount_per_user = safe_div(s.deposit_amount, s.active_member)
    s.winrate = safe_div(s.gross_gaming_revenue, s.deposit_amount) * 100
    s.withdraw_rate = safe_div(s.withdraw_cases, s.deposit_cases) * 100


# =============================================================================
# SUPPLEMENTARY AGGREGATES
# =============================================================================

@dataclass
class ProcessingDistribution:
    """Box-plot summary of processing times in seconds."""
    count: int = 0
    min: float = 0.0
    q1: float = 0.0
    median: float = 0.0
    q3: float = 0.0
    max: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'count': self.count,
            'min': round(self.min, 2),
            'q1': round(self.q1, 2),
            'median': round(self.median, 2),
            'q3': round(self.q3, 2),
            'max': round(self.max, 2),
        }


def processing_distribution(
    rows: Iterable,
    automation_only: bool = False,
    policy: KPIPolicy = DEFAULT_POLICY,
) -> ProcessingDistribution:
    """
    Quartiles of positive proc_sec values.

    Quartiles are picked by index (floor(n * p)) from the sorted values,
    no interpolation.
    """
    values = sorted(
        float(row.proc_sec)
        for row in rows
        if row.proc_sec is not None and row.proc_sec > 0
        and (not automation_only or policy.is_automation(row.operator_group))
    )
    n = len(values)
    if n == 0:
        return ProcessingDistribution()
    return ProcessingDistribution(
        count=n,
        min=values[0],
        q1=values[int(n * 0.25)],
        median=values[int(n * 0.5)],
        q3=values[int(n * 0.75)],
        max=values[-1],
    )


def daily_peak_hours(rows: Iterable, policy: KPIPolicy = DEFAULT_POLICY) -> List[Dict]:
    """
    For each date, the hour with the most transactions.

    Ties go to the earliest hour. Rows without a parseable time are ignored.
    Returns one dict per date, sorted by date:
        {date, peakHour, totalTransactions, automationTransactions,
         avgProcessingTimeAutomation}
    """
    by_date: Dict = defaultdict(lambda: defaultdict(list))
    for row in rows:
        if row.date is None or row.hour is None:
            continue
        by_date[row.date][row.hour].append(row)

    results = []
    for day in sorted(by_date):
        hours = by_date[day]
        peak_hour = max(sorted(hours), key=lambda h: len(hours[h]))
        peak_rows = hours[peak_hour]
        auto_rows = [r for r in peak_rows if policy.is_automation(r.operator_group)]
        auto_latency = [r.proc_sec for r in auto_rows if r.proc_sec is not None]
        results.append({
            'date': day.isoformat(),
            'peakHour': f"{peak_hour:02d}:00",
            'totalTransactions': len(peak_rows),
            'automationTransactions': len(auto_rows),
            'avgProcessingTimeAutomation': round(safe_div(sum(auto_latency), len(auto_latency)), 2),
        })
    return results
