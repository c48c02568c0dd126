"""
Contract layer: Pydantic param models validated at the HTTP boundary.
"""

from .pydantic_models import (
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
