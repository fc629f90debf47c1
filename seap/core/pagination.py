"""
Pagination utilities for the SEAP API.
Provides consistent pagination across list endpoints.
"""
from typing import TypeVar, Generic, List
from pydantic import BaseModel
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool
    has_prev: bool


def create_paginated_response(
    items: List[T],
    total: int,
    page: int,
    limit: int
) -> dict:
    """
    Create a paginated response dictionary.

    Args:
        items: List of items for current page
        total: Total count of all items
        page: Current page number
        limit: Items per page
    """
    pages = (total + limit - 1) // limit if limit > 0 else 0

    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1
    }


async def paginate_query(
    session: AsyncSession,
    query,
    page: int = 1,
    limit: int = 20
) -> dict:
    """Execute a select with offset/limit and return the paginated envelope."""
    count_query = select(func.count()).select_from(query.subquery())
    total = (await session.exec(count_query)).one()

    offset = (page - 1) * limit
    result = await session.exec(query.offset(offset).limit(limit))
    return create_paginated_response(result.all(), total, page, limit)
