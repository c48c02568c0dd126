"""
Shared Pydantic types for analytics params.

- MonthName: "9" / "september" -> "September"
- CoercedDate: "2025-09-01" or ISO timestamp -> date(2025, 9, 1)
- LineParam: "" -> None, " ABC " -> "ABC" ("ALL" kept as the sentinel)
"""

from datetime import date
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator

from utils.normalize import to_date, to_month, to_str


def _month(v: Any) -> Optional[str]:
    return to_month(v, field='month')


def _date(v: Any) -> Optional[date]:
    return to_date(v, field='date')


def _line(v: Any) -> Optional[str]:
    return to_str(v, field='line')


MonthName = Annotated[Optional[str], BeforeValidator(_month)]
CoercedDate = Annotated[Optional[date], BeforeValidator(_date)]
LineParam = Annotated[Optional[str], BeforeValidator(_line)]
