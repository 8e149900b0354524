"""Category model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from recipebook.database import Base
from recipebook.models.mixins import TimestampMixin


class Category(Base, TimestampMixin):
    """Category for grouping ingredients, ordered by sort_order (store aisle order)."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    # Relationships
    ingredients = relationship("Ingredient", back_populates="category")
