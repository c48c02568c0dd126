"""
Pydantic models for /api/<currency>/... analytics endpoint params.

Usage:
    params = KPIFilterParams.model_validate(request.args.to_dict())
"""

from typing import Literal, Optional

from pydantic import Field, model_validator

from constants import TABLE_DEPOSIT
from services.kpi.periods import MODE_DAILY
from .base import BaseParamsModel
from .types import CoercedDate, LineParam, MonthName

Bucket = Literal['daily', 'weekly', 'monthly', 'hourly']


class SlicerOptionsParams(BaseParamsModel):
    table: str = Field(default=TABLE_DEPOSIT, description="Table the page reads")


class KPIFilterParams(BaseParamsModel):
    """
    Slicer params shared by the overview and auto-approval pages.

    Either year/month or startDate/endDate; QueryFilter rejects both.
    isWeekly=true is the legacy spelling of bucket=weekly.
    """
    line: LineParam = None
    year: Optional[int] = None
    month: MonthName = None
    start_date: CoercedDate = Field(default=None, alias='startDate')
    end_date: CoercedDate = Field(default=None, alias='endDate')
    bucket: Bucket = 'daily'
    is_weekly: bool = Field(default=False, alias='isWeekly')

    @model_validator(mode='after')
    def apply_weekly_flag(self) -> 'KPIFilterParams':
        if self.is_weekly and self.bucket == 'daily':
            object.__setattr__(self, 'bucket', 'weekly')
        return self


class AutoApprovalParams(KPIFilterParams):
    side: Literal['deposit', 'withdraw'] = 'deposit'


class ComparisonParams(BaseParamsModel):
    """Both periods are required; each must have start <= end."""
    line: LineParam = None
    # exports only: render values for display (currency symbol, K/M)
    formatted: bool = False
    period_a_start: CoercedDate = Field(alias='periodAStart')
    period_a_end: CoercedDate = Field(alias='periodAEnd')
    period_b_start: CoercedDate = Field(alias='periodBStart')
    period_b_end: CoercedDate = Field(alias='periodBEnd')

    @model_validator(mode='after')
    def check_periods(self) -> 'ComparisonParams':
        for label, start, end in (
            ('periodA', self.period_a_start, self.period_a_end),
            ('periodB', self.period_b_start, self.period_b_end),
        ):
            if start is None or end is None:
                raise ValueError(f"{label}Start and {label}End are required")
            if start > end:
                raise ValueError(f"{label}Start must be on or before {label}End")
        return self


class PreviousPeriodParams(BaseParamsModel):
    line: LineParam = None
    mode: Literal['Quarter', 'Daily'] = MODE_DAILY
    start_date: CoercedDate = Field(alias='startDate')
    end_date: CoercedDate = Field(alias='endDate')
    quarter: Optional[Literal['Q1', 'Q2', 'Q3', 'Q4']] = None
    year: Optional[int] = None
    table: str = TABLE_DEPOSIT

    @model_validator(mode='after')
    def check_required(self) -> 'PreviousPeriodParams':
        if self.start_date is None or self.end_date is None:
            raise ValueError("startDate and endDate are required")
        if self.mode == 'Quarter' and (self.quarter is None or self.year is None):
            raise ValueError("Quarter mode requires quarter and year")
        return self


class TargetListParams(BaseParamsModel):
    currency: str
    year: Optional[int] = None
    quarter: Optional[Literal['Q1', 'Q2', 'Q3', 'Q4']] = None


class TargetPayload(BaseParamsModel):
    """POST /targets body. Target fields left out are not changed."""
    currency: str
    line: str
    year: int
    quarter: Literal['Q1', 'Q2', 'Q3', 'Q4']
    target_ggr: Optional[float] = Field(default=None, alias='targetGgr')
    target_deposit_amount: Optional[float] = Field(default=None, alias='targetDepositAmount')
    target_deposit_cases: Optional[int] = Field(default=None, ge=0, alias='targetDepositCases')
    target_active_member: Optional[int] = Field(default=None, ge=0, alias='targetActiveMember')
    forecast_ggr: Optional[float] = Field(default=None, alias='forecastGgr')
    reason: Optional[str] = None
    user_email: Optional[str] = Field(default=None, alias='userEmail')


class AuditLogParams(BaseParamsModel):
    currency: Optional[str] = None
    limit: int = Field(default=100, ge=1, le=1000)


class TargetAchievementParams(BaseParamsModel):
    """
    year + quarter pick the targets; startDate/endDate (both or neither)
    narrow the period and prorate the quarterly targets by day count.
    """
    year: int
    quarter: Literal['Q1', 'Q2', 'Q3', 'Q4']
    start_date: CoercedDate = Field(default=None, alias='startDate')
    end_date: CoercedDate = Field(default=None, alias='endDate')

    @model_validator(mode='after')
    def check_range(self) -> 'TargetAchievementParams':
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("startDate and endDate must be given together")
        if self.start_date is not None and self.start_date > self.end_date:
            raise ValueError("startDate must be on or before endDate")
        return self
