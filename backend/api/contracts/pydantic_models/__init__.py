"""
Pydantic models for API param validation.

Key features:
- Frozen models (immutable after normalization)
- Auto type coercion with clear error messages
- Aliases match the query string spelling (startDate, periodAStart, ...)

Usage:
    from api.contracts.pydantic_models import KPIFilterParams

    params = KPIFilterParams.model_validate(request.args.to_dict())
"""

from .base import BaseParamsModel
from .analytics import (
    AuditLogParams,
    AutoApprovalParams,
    ComparisonParams,
    KPIFilterParams,
    PreviousPeriodParams,
    SlicerOptionsParams,
    TargetAchievementParams,
    TargetListParams,
    TargetPayload,
)

__all__ = [
    'BaseParamsModel',
    'AuditLogParams',
    'AutoApprovalParams',
    'ComparisonParams',
    'KPIFilterParams',
    'PreviousPeriodParams',
    'SlicerOptionsParams',
    'TargetAchievementParams',
    'TargetListParams',
    'TargetPayload',
]
