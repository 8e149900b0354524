"""Recipe schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

# --- Recipe Ingredient ---


class RecipeIngredientCreate(BaseModel):
    """Ingredient line of a recipe."""

    ingredient_id: int
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class RecipeIngredientResponse(BaseModel):
    """Ingredient line with catalog details."""

    id: int
    name: str
    unit: str | None
    category: str | None
    amount: Decimal


# --- Recipe ---


class RecipeCreate(BaseModel):
    """Create a new recipe."""

    name: str = Field(..., min_length=1, max_length=255)
    instructions: str | None = Field(None, max_length=50000)
    image_url: str | None = Field(None, max_length=255)
    ingredients: list[RecipeIngredientCreate] = []


class RecipeUpdate(BaseModel):
    """Replace a recipe, including its full set of ingredient lines."""

    name: str = Field(..., min_length=1, max_length=255)
    instructions: str | None = Field(None, max_length=50000)
    image_url: str | None = Field(None, max_length=255)
    ingredients: list[RecipeIngredientCreate] = []


class RecipeListResponse(BaseModel):
    """Recipe summary for list view."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    instructions: str | None
    image_url: str | None
    ingredient_count: int
    created_at: datetime


class RecipeResponse(BaseModel):
    """Recipe response with ingredients."""

    id: int
    name: str
    instructions: str | None
    image_url: str | None
    ingredients: list[RecipeIngredientResponse]
