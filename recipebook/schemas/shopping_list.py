"""Shopping list schemas."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ShoppingListItemCreate(BaseModel):
    """Manually add an ingredient amount to the shopping list."""

    ingredient_id: int
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    unit: str | None = Field(None, max_length=50)


class ShoppingListItemUpdate(BaseModel):
    """Update amount and/or checked state of a shopping list item."""

    amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    is_checked: bool | None = None


class ShoppingListItemResponse(BaseModel):
    """Shopping list row joined with its ingredient."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    ingredient_id: int
    name: str
    category: str | None
    amount: Decimal
    unit: str | None
    is_checked: bool


class GenerateRequest(BaseModel):
    """Recipe selection; a recipe id may repeat to cook it more than once.

    Left untyped so the service answers malformed selections with 400.
    """

    recipe_ids: Any = None


class GenerateResult(BaseModel):
    """Result of merging a recipe selection into the shopping list."""

    message: str
    recipes_selected: int
    ingredients_updated: int
