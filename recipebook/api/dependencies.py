"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from recipebook.database import get_db
from recipebook.models.user import User
from recipebook.services.auth import get_token_user_id
from recipebook.services.shopping_list_service import ShoppingListService

security = HTTPBearer()


def get_user_from_token(db: Session, token: str) -> User | None:
    """Resolve a JWT to its user, or None if the token or user is invalid."""
    user_id = get_token_user_id(token)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    user = get_user_from_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_shopping_list_service(
    db: Annotated[Session, Depends(get_db)],
) -> ShoppingListService:
    """Get shopping list service with dependencies."""
    return ShoppingListService(db)
