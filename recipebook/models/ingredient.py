"""Ingredient model."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from recipebook.database import Base
from recipebook.models.mixins import TimestampMixin


class Ingredient(Base, TimestampMixin):
    """Ingredient catalog entry shared by recipes and the shopping list."""

    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    unit = Column(String(50), nullable=True)  # "g", "ml", "Stk", etc.
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    category = relationship("Category", back_populates="ingredients")
