"""Shopping list item model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from recipebook.database import Base
from recipebook.models.mixins import TimestampMixin


class ShoppingListItem(Base, TimestampMixin):
    """Open shopping list entry. At most one row exists per ingredient."""

    __tablename__ = "shopping_list_items"

    id = Column(Integer, primary_key=True, index=True)
    ingredient_id = Column(
        Integer,
        ForeignKey("ingredients.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    is_checked = Column(Boolean, nullable=False, default=False, index=True)
    unit = Column(String(50), nullable=True)  # overrides Ingredient.unit when set

    # Relationships
    ingredient = relationship("Ingredient")
