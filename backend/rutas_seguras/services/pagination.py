"""
Rutas Seguras Backend — Page-Number Pagination
==============================================

What:  Shared offset pagination for route search and every list endpoint.
Why:   One envelope for every paginated read: current page, total pages,
       total items, items per page.
How:   A COUNT over the filtered query, then LIMIT/OFFSET on the ordered query.

Rules:
    - page is clamped into [1, max_page]; 0 and negatives become 1
    - total_pages = ceil(total_items / page_size), 0 when nothing matches
    - a page past the last one yields an empty row list with correct totals

Page size and max page come from the running app's Settings, carried in a
PageRequest built by the `get_page_request` dependency.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.schemas.common import Pagination


def clamp_page(page: Optional[int], max_page: int) -> int:
    """Force a requested page number into [1, max_page]."""
    if page is None or page < 1:
        return 1
    return min(page, max_page)


@dataclass(frozen=True)
class PageRequest:
    """A requested page plus the size limits it is read with."""

    page: Optional[int]
    page_size: int
    max_page: int

    @property
    def current(self) -> int:
        return clamp_page(self.page, self.max_page)


def build_pagination(page: int, total_items: int, page_size: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total_items / page_size) if total_items else 0,
        total_items=total_items,
        items_per_page=page_size,
    )


async def paginate(
    db: AsyncSession,
    query: Select,
    page: PageRequest,
) -> Tuple[List[Any], Pagination]:
    """
    Run `query` for one page.

    Args:
        db:    Async database session
        query: A filtered and ordered SELECT of ORM entities
        page:  Requested page and the app's size limits

    Returns:
        (rows on this page, Pagination block)
    """
    size = page.page_size
    current = page.current

    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.limit(size).offset((current - 1) * size))
    rows = list(result.scalars().all())

    return rows, build_pagination(current, total, size)
