"""
Pagination Utility Module

Provides the pagination helpers shared by the student and event listings.
"""
from typing import Optional, Any
from pydantic import BaseModel


class PaginationParams(BaseModel):
    """Standard pagination parameters"""
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_pagination(
    page: Optional[Any],
    limit: Optional[Any],
    default_limit: int = 10,
    max_limit: int = 100
) -> PaginationParams:
    """
    Build pagination params from raw query values.

    Non-numeric values fall back to the defaults; page is at least 1 and
    limit is clamped to [1, max_limit].
    """
    try:
        page_value = int(page) if page not in (None, "") else 1
    except (TypeError, ValueError):
        page_value = 1
    try:
        limit_value = int(limit) if limit not in (None, "") else default_limit
    except (TypeError, ValueError):
        limit_value = default_limit

    page_value = max(1, page_value)
    limit_value = max(1, min(max_limit, limit_value))
    return PaginationParams(page=page_value, limit=limit_value)


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit); zero when there is nothing to page through"""
    if total <= 0 or limit <= 0:
        return 0
    return (total + limit - 1) // limit


def build_pagination(page: int, limit: int, total: int) -> dict:
    """
    Create the pagination block returned alongside listings.

    Returns:
        {"page", "limit", "total", "totalPages"}
    """
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages(total, limit),
    }
