from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def of(cls, page: Optional[int] = None, limit: Optional[int] = None) -> "PageRequest":
        page = 1 if page is None else int(page)
        limit = DEFAULT_PAGE_SIZE if limit is None else int(limit)
        if page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing plus the total number of matching rows."""

    items: Sequence[T]
    total: int
    request: PageRequest

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.request.limit)

    def pagination(self) -> dict[str, Any]:
        return {
            "page": self.request.page,
            "limit": self.request.limit,
            "total": self.total,
            "pages": self.pages,
        }
