"""Category API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recipebook.api.dependencies import get_current_user
from recipebook.database import get_db
from recipebook.models.category import Category
from recipebook.models.ingredient import Ingredient
from recipebook.models.user import User
from recipebook.schemas.auth import MessageResponse
from recipebook.schemas.category import CategoryCreate, CategoryOrderUpdate, CategoryResponse

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
def get_categories(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all categories in store order."""
    return db.query(Category).order_by(Category.sort_order, Category.id).all()


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new category at the end of the sort order."""
    max_sort_order = db.query(func.max(Category.sort_order)).scalar()

    category = Category(name=category_data.name, sort_order=(max_sort_order or 0) + 1)
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A category with this name already exists",
        ) from None

    db.refresh(category)
    return category


@router.put("/order", response_model=MessageResponse)
def update_category_order(
    order_data: CategoryOrderUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Reorder categories; each id gets its position in the list as sort_order."""
    categories = {
        category.id: category
        for category in db.query(Category).filter(Category.id.in_(order_data.ordered_ids)).all()
    }

    for index, category_id in enumerate(order_data.ordered_ids):
        category = categories.get(category_id)
        if category:
            category.sort_order = index

    db.commit()
    return MessageResponse(message="Category order updated")


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a category that no ingredient uses anymore."""
    in_use = (
        db.query(func.count(Ingredient.id)).filter(Ingredient.category_id == category_id).scalar()
    )
    if in_use > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category is still used by {in_use} ingredient(s)",
        )

    category = db.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    db.delete(category)
    db.commit()
