"""User model."""

from sqlalchemy import Column, Integer, String

from recipebook.database import Base
from recipebook.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
