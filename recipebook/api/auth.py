"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from recipebook.api.dependencies import get_current_user
from recipebook.database import get_db
from recipebook.models.user import User
from recipebook.schemas.auth import (
    AppStatusResponse,
    AuthResponse,
    MessageResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from recipebook.services.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    needs_initial_user,
    register_initial_user,
)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get("/status", response_model=AppStatusResponse)
async def get_app_status(
    db: Annotated[Session, Depends(get_db)],
):
    """Check whether the initial user still has to be created."""
    return AppStatusResponse(needs_initial_user=needs_initial_user(db))


@router.post(
    "/register-initial-user",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_initial_user(
    user_data: UserCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Create the first user. Only allowed while no user exists."""
    register_initial_user(db, user_data.username, user_data.password)
    return MessageResponse(message="Initial user created successfully. You can now log in.")


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with username and password."""
    user = authenticate_user(db, credentials.username, credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(user.id, user.username)

    return AuthResponse(
        access_token=access_token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_additional_user(
    user_data: UserCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create another household member."""
    return create_user(db, user_data.username, user_data.password)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Logout (client should discard token)."""
    return MessageResponse(message="Logged out successfully")
