"""Ingredient schemas."""

from pydantic import BaseModel, ConfigDict, Field


class IngredientCreate(BaseModel):
    """Create a new ingredient."""

    name: str = Field(..., min_length=1, max_length=255)
    unit: str | None = Field(None, max_length=50)
    category_id: int | None = None


class IngredientUpdate(BaseModel):
    """Replace an ingredient's attributes."""

    name: str = Field(..., min_length=1, max_length=255)
    unit: str | None = Field(None, max_length=50)
    category_id: int | None = None


class IngredientResponse(BaseModel):
    """Ingredient response with its category name."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    unit: str | None
    category_id: int | None
    category: str | None = None
