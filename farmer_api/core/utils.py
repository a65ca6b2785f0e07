"""
Utility helpers shared across routers/services.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass
class PageMeta:
    total: int
    page: int
    pages: int
    has_next_page: bool
    has_prev_page: bool


@dataclass
class Page(Generic[T]):
    data: list[T]
    meta: PageMeta


def normalize_paging(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """Fall back to the defaults for missing or non-positive values."""
    page_value = page if page and page > 0 else DEFAULT_PAGE
    limit_value = limit if limit and limit > 0 else DEFAULT_LIMIT
    return page_value, limit_value


def page_meta(total: int, page: int, limit: int) -> PageMeta:
    pages = math.ceil(total / limit) if limit else 0
    return PageMeta(
        total=total,
        page=page,
        pages=pages,
        has_next_page=page < pages,
        has_prev_page=page > 1,
    )
