import math
from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


@dataclass(frozen=True)
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value: int | str | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def resolve_page(page: int | str | None, limit: int | str | None) -> Page:
    """
    Clamp raw query values: page >= 1, 1 <= limit <= 50.

    Missing, zero or non-numeric values fall back to the defaults.
    """
    page = max(_to_int(page) or 1, 1)
    limit = min(max(_to_int(limit) or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return Page(page=page, limit=limit)


def pagination_meta(page: Page, total: int) -> dict:
    total_pages = math.ceil(total / page.limit)
    return {
        "current_page": page.page,
        "total_pages": total_pages,
        "total_products": total,
        "limit": page.limit,
        "has_more": page.page < total_pages,
    }
