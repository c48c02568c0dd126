"""
KPI Policy - thresholds and channel labels used by the KPI calculator.

Defaults:
    overdue_threshold_sec   30   proc_sec strictly above this is overdue
    fast_threshold_sec      10   proc_sec at or below this is fast
    automation_channels     Automation, BOT
    manual_channels         Staff, User, Manual
    automation_rollout_date None (no floor on automation series)

Build from app config with KPIPolicy.from_config(current_app.config).
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import FrozenSet, Mapping, Optional

from utils.normalize import to_date, to_float


@dataclass(frozen=True)
class KPIPolicy:
    overdue_threshold_sec: float = 30.0
    fast_threshold_sec: float = 10.0
    automation_channels: FrozenSet[str] = field(
        default_factory=lambda: frozenset({'Automation', 'BOT'})
    )
    manual_channels: FrozenSet[str] = field(
        default_factory=lambda: frozenset({'Staff', 'User', 'Manual'})
    )
    automation_rollout_date: Optional[date] = None

    def is_automation(self, operator_group) -> bool:
        return operator_group in self.automation_channels

    def is_manual(self, operator_group) -> bool:
        return operator_group in self.manual_channels

    def is_overdue(self, proc_sec) -> bool:
        return proc_sec is not None and proc_sec > self.overdue_threshold_sec

    def is_fast(self, proc_sec) -> bool:
        return proc_sec is not None and proc_sec <= self.fast_threshold_sec

    def with_overrides(self, **changes) -> 'KPIPolicy':
        return replace(self, **changes)

    @classmethod
    def from_config(cls, config: Mapping) -> 'KPIPolicy':
        """Build a policy from a Flask config mapping; missing keys keep defaults."""
        defaults = cls()
        return cls(
            overdue_threshold_sec=to_float(
                config.get('KPI_OVERDUE_THRESHOLD_SEC'),
                default=defaults.overdue_threshold_sec,
                field='KPI_OVERDUE_THRESHOLD_SEC',
            ),
            fast_threshold_sec=to_float(
                config.get('KPI_FAST_THRESHOLD_SEC'),
                default=defaults.fast_threshold_sec,
                field='KPI_FAST_THRESHOLD_SEC',
            ),
            automation_rollout_date=to_date(
                config.get('KPI_AUTOMATION_ROLLOUT_DATE'),
                field='KPI_AUTOMATION_ROLLOUT_DATE',
            ),
        )


DEFAULT_POLICY = KPIPolicy()
