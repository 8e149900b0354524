"""SQLAlchemy models."""

from recipebook.models.category import Category
from recipebook.models.ingredient import Ingredient
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.models.shopping_list_item import ShoppingListItem
from recipebook.models.user import User

__all__ = [
    "User",
    "Category",
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
    "ShoppingListItem",
]
