"""Household account service: password hashing, tokens and user bootstrap."""

import logging
from datetime import UTC, datetime, timedelta

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recipebook.config import get_settings
from recipebook.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user_id: int, username: str) -> str:
    """Issue a bearer token naming the user id as subject."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    claims = {"sub": str(user_id), "username": username, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def get_token_user_id(token: str) -> int | None:
    """Return the user id a token was issued for, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """Check username and password; unknown users and wrong passwords look the same."""
    user = get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for username={username!r}")
        return None
    return user


def needs_initial_user(db: Session) -> bool:
    """True until the first household member has been created."""
    return db.query(func.count(User.id)).scalar() == 0


def create_user(db: Session, username: str, password: str) -> User:
    """Add a household member. Raises 409 if the username is taken."""
    user = User(username=username, password_hash=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists",
        ) from None

    db.refresh(user)
    logger.info(f"Created user id={user.id} username={user.username!r}")
    return user


def register_initial_user(db: Session, username: str, password: str) -> User:
    """Create the first user. Raises 403 once any user exists."""
    if not needs_initial_user(db):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Initial user already exists",
        )
    return create_user(db, username, password)
