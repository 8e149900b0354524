"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Create a user (initial bootstrap or by an authenticated user)."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)


class UserLogin(BaseModel):
    """User login request."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: "UserResponse"


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class AppStatusResponse(BaseModel):
    """Whether the first user still has to be created."""

    needs_initial_user: bool


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
