# dormhub/services/common/pagination.py
"""
Pagination helpers for the service layer.
"""
from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from dormhub.schemas.common.base import BaseSchema
from dormhub.schemas.common.pagination import PaginatedResponse, PaginationParams

TModel = TypeVar("TModel")
TSchema = TypeVar("TSchema", bound=BaseSchema)


def paginate(
    *,
    items: Sequence[TModel],
    total_items: int,
    params: PaginationParams,
    mapper: Callable[[TModel], TSchema],
) -> PaginatedResponse[TSchema]:
    """
    Build a paginated response from models.

    Args:
        items: Current page of ORM model instances
        total_items: Total count across all pages
        params: Pagination parameters (page, page_size)
        mapper: Function to convert model to schema

    Example:
        >>> response = paginate(
        ...     items=rooms,
        ...     total_items=total,
        ...     params=params,
        ...     mapper=RoomResponse.model_validate,
        ... )
    """
    return PaginatedResponse.create(
        items=[mapper(item) for item in items],
        total_items=total_items,
        page=params.page,
        page_size=params.page_size,
    )
