"""Page-number pagination over view pipelines.

Pages are windows over the pipeline's total order (declared sort, then id
ascending), so repeated calls return the same items when nothing was written
in between, and pages 1..total_pages together hold every matching row once.
"""

from math import ceil
from typing import Any

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from src.views.builder import PipelineSpec
from src.views.executor import count_rows, fetch_rows


class Page(BaseModel):
    """One window of a paginated view."""

    items: list[dict[str, Any]]
    total_items: int
    total_pages: int
    current_page: int
    page_size: int


def coerce_positive(value: Any, default: int) -> int:
    """Coerce a page or page size to a positive integer.

    ``None``, empty and unparsable values fall back to the default; zero and
    negative values are raised to 1.
    """
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(number, 1)


def window(page: Any = None, page_size: Any = None) -> tuple[int, int]:
    """Return the coerced (page, page_size), page size capped at MAX_PAGE_SIZE."""
    return (
        coerce_positive(page, DEFAULT_PAGE),
        min(coerce_positive(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE),
    )


async def paginate(
    db: AsyncSession,
    spec: PipelineSpec,
    page: Any = None,
    page_size: Any = None,
) -> Page:
    """Window a pipeline's results and count all matching rows.

    A page past the end returns no items rather than failing.
    """
    current_page, size = window(page, page_size)
    offset = (current_page - 1) * size

    total = await count_rows(db, spec)
    items = await fetch_rows(db, spec, offset=offset, limit=size) if offset < total else []

    return Page(
        items=items,
        total_items=total,
        total_pages=ceil(total / size) if total else 0,
        current_page=current_page,
        page_size=size,
    )
