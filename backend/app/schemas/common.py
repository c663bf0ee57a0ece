"""Response wrappers shared by the listing endpoints."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a landlord's rows: `response_model=PaginatedResponse[PropertySummary]`.

    `total` counts every row matching the filter, not just this page.
    """
    items: list[T]
    total: int
    limit: int
    offset: int
