from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


def normalize_page(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    page = max(1, int(page or 1))
    limit = int(limit or DEFAULT_PAGE_SIZE)
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    return page, limit


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, items: Sequence[Any], *, page: int, limit: int, total: int) -> "Page[Any]":
        return cls(items=list(items), page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)
