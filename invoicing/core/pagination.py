"""
Pagination utilities for the Invoicing API.
Provides consistent pagination across all list endpoints.
"""
from typing import List, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Pagination query parameters."""
    page: int = 1
    limit: int = 20


def pagination_params(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100)
) -> PaginationParams:
    """FastAPI dependency reading ?page=&limit=."""
    return PaginationParams(page=page, limit=limit)


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

    Returns:
        Dictionary with pagination metadata
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
