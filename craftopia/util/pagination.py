from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return int(math.ceil(self.total / self.limit)) if self.limit > 0 else 0

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def summary(self, total_key: str) -> Dict[str, Any]:
        """The in-body pagination block, e.g. total_key="totalDecors"."""
        return {
            "currentPage": self.page,
            "totalPages": self.pages,
            total_key: self.total,
            "hasNextPage": self.has_next,
            "hasPrevPage": self.has_prev,
        }

    def envelope(self) -> Dict[str, Any]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


def clamp_page(page: int | None) -> int:
    try:
        p = int(page or 1)
    except (TypeError, ValueError):
        p = 1
    return max(1, p)


def clamp_limit(limit: int | None, *, default: int, maximum: int) -> int:
    try:
        n = int(limit) if limit is not None else int(default)
    except (TypeError, ValueError):
        n = int(default)
    return min(max(1, n), int(maximum))


def paginate(page: int | None, limit: int | None, total: int, *, default_limit: int = 10, max_limit: int = 100) -> Pagination:
    return Pagination(
        page=clamp_page(page),
        limit=clamp_limit(limit, default=default_limit, maximum=max_limit),
        total=max(0, int(total)),
    )


def parse_sort(sort: str | None, *, allowed: tuple, default: str) -> list:
    """Parse a "-field" / "field" sort key into a pymongo sort list.

    Unknown fields fall back to `default`.
    """
    s = (sort or "").strip() or default
    direction = 1
    if s.startswith("-"):
        direction = -1
        s = s[1:]
    if s not in allowed:
        s = default.lstrip("-")
        direction = -1 if default.startswith("-") else 1
    return [(s, direction)]
