"""Recipe and RecipeIngredient models."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from recipebook.database import Base
from recipebook.models.mixins import SoftDeleteMixin, TimestampMixin


class Recipe(Base, TimestampMixin, SoftDeleteMixin):
    """Recipe model for storing recipe definitions."""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    instructions = Column(Text, nullable=True)
    image_url = Column(String(255), nullable=True)

    # Relationships
    ingredients = relationship(
        "RecipeIngredient", back_populates="recipe", cascade="all, delete-orphan"
    )


class RecipeIngredient(Base, TimestampMixin):
    """Amount of one ingredient needed for a single preparation of a recipe."""

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    amount = Column(Numeric(10, 2), nullable=False)

    # Relationships
    recipe = relationship("Recipe", back_populates="ingredients")
    ingredient = relationship("Ingredient")
