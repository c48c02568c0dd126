"""
Brand Access Filter - restrict the brand universe a caller can see.

The caller is an explicit CallerContext built at the HTTP boundary from the
`x-user-role` and `x-user-allowed-brands` headers; nothing in the KPI core
reads ambient session state.

    allowed_brands is None  -> unrestricted (admin)
    allowed_brands == []    -> restricted to nothing
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from constants import LINE_ALL, MANAGER_ROLE_PREFIX, ROLE_ADMIN, is_all_lines, normalize_currency

logger = logging.getLogger('analytics.brand_access')


class BrandAccessError(PermissionError):
    """Caller asked for a brand (or currency) outside its allow-list. Maps to 403."""

    def __init__(self, message: str, brand: str = None):
        super().__init__(message)
        self.brand = brand


@dataclass(frozen=True)
class CallerContext:
    role: Optional[str] = None
    allowed_brands: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if self.allowed_brands is not None:
            object.__setattr__(self, 'allowed_brands', tuple(self.allowed_brands))

    @property
    def is_restricted(self) -> bool:
        return self.allowed_brands is not None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


UNRESTRICTED = CallerContext()


def filter_brands_by_user(all_brands: Sequence[str], allowed_brands: Optional[Sequence[str]]) -> List[str]:
    """
    Intersect all_brands with the allow-list, keeping all_brands order.

    None means unrestricted and returns all_brands unchanged.
    """
    if allowed_brands is None:
        return list(all_brands)
    allowed = set(allowed_brands)
    return [brand for brand in all_brands if brand in allowed]


def resolve_line_scope(line: Optional[str], caller: CallerContext) -> Tuple[Optional[str], Optional[Tuple[str, ...]]]:
    """
    Map a requested line to QueryFilter (line, lines).

    Unrestricted callers pass through with lines=None. Restricted callers
    asking for ALL get their allow-list; asking for any other brand requires
    it to be on the list.

    Raises:
        BrandAccessError: brand outside the caller's allow-list
    """
    if not caller.is_restricted:
        return (LINE_ALL if is_all_lines(line) else line.strip()), None

    if is_all_lines(line):
        return LINE_ALL, caller.allowed_brands

    brand = line.strip()
    if brand not in caller.allowed_brands:
        logger.warning("brand_access_denied brand=%s role=%s", brand, caller.role)
        raise BrandAccessError(f"Access to brand {brand!r} is not permitted", brand=brand)
    return brand, caller.allowed_brands


def can_edit_currency(caller: CallerContext, currency: str) -> bool:
    """admin edits every currency; manager_<cur> edits its own."""
    if caller.is_admin:
        return True
    if not caller.role:
        return False
    return caller.role == f"{MANAGER_ROLE_PREFIX}{normalize_currency(currency).lower()}"
