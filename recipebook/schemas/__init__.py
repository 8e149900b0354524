"""Pydantic schemas for API requests and responses."""

from recipebook.schemas.auth import AuthResponse, UserCreate, UserLogin, UserResponse
from recipebook.schemas.category import CategoryCreate, CategoryOrderUpdate, CategoryResponse
from recipebook.schemas.ingredient import IngredientCreate, IngredientResponse, IngredientUpdate
from recipebook.schemas.recipe import RecipeCreate, RecipeResponse, RecipeUpdate
from recipebook.schemas.shopping_list import (
    GenerateRequest,
    GenerateResult,
    ShoppingListItemCreate,
    ShoppingListItemResponse,
    ShoppingListItemUpdate,
)

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "CategoryCreate",
    "CategoryOrderUpdate",
    "CategoryResponse",
    "IngredientCreate",
    "IngredientUpdate",
    "IngredientResponse",
    "RecipeCreate",
    "RecipeUpdate",
    "RecipeResponse",
    "ShoppingListItemCreate",
    "ShoppingListItemUpdate",
    "ShoppingListItemResponse",
    "GenerateRequest",
    "GenerateResult",
]
