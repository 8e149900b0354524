"""Category schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    """Create a new category."""

    name: str = Field(..., min_length=1, max_length=255)


class CategoryOrderUpdate(BaseModel):
    """New category order, first id gets sort_order 0."""

    ordered_ids: list[int]


class CategoryResponse(BaseModel):
    """Category response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sort_order: int
    created_at: datetime
    updated_at: datetime
