"""Shopping list API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from recipebook.api.dependencies import get_current_user, get_shopping_list_service
from recipebook.database import get_db
from recipebook.models.category import Category
from recipebook.models.ingredient import Ingredient
from recipebook.models.shopping_list_item import ShoppingListItem
from recipebook.models.user import User
from recipebook.schemas.shopping_list import (
    GenerateRequest,
    GenerateResult,
    ShoppingListItemCreate,
    ShoppingListItemResponse,
    ShoppingListItemUpdate,
)
from recipebook.services.realtime import publish_shopping_list_event
from recipebook.services.shopping_list_service import ShoppingListService

router = APIRouter(prefix="/api/v1/shopping-list", tags=["shopping-list"])


def query_items(db: Session):
    """Query shopping list rows joined with ingredient and category details."""
    return (
        db.query(
            ShoppingListItem.id,
            ShoppingListItem.ingredient_id,
            Ingredient.name,
            Category.name.label("category"),
            ShoppingListItem.amount,
            func.coalesce(ShoppingListItem.unit, Ingredient.unit).label("unit"),
            ShoppingListItem.is_checked,
        )
        .join(Ingredient, ShoppingListItem.ingredient_id == Ingredient.id)
        .outerjoin(Category, Ingredient.category_id == Category.id)
    )


def get_item_response(db: Session, item_id: int) -> ShoppingListItemResponse:
    """Get a single joined shopping list row."""
    row = query_items(db).filter(ShoppingListItem.id == item_id).first()
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return ShoppingListItemResponse.model_validate(row)


@router.get("", response_model=list[ShoppingListItemResponse])
def get_items(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the shopping list in store order."""
    rows = query_items(db).order_by(
        Category.sort_order.is_(None), Category.sort_order, Ingredient.name
    )
    return [ShoppingListItemResponse.model_validate(row) for row in rows.all()]


@router.post(
    "/from-recipes",
    response_model=GenerateResult,
    status_code=status.HTTP_201_CREATED,
)
def generate_from_recipes(
    request: GenerateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
):
    """Add the ingredients of the selected recipes to the shopping list."""
    return service.generate_from_selection(request.recipe_ids)


@router.post("", response_model=ShoppingListItemResponse)
def add_item(
    item_data: ShoppingListItemCreate,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[ShoppingListService, Depends(get_shopping_list_service)],
):
    """Add an ingredient, merging into its existing row if already listed."""
    item, created = service.add_item(item_data.ingredient_id, item_data.amount, item_data.unit)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return get_item_response(db, item.id)


@router.put("/{item_id}", response_model=ShoppingListItemResponse)
def update_item(
    item_id: int,
    item_data: ShoppingListItemUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change the amount or checked state of an item."""
    if item_data.amount is None and item_data.is_checked is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either amount or is_checked must be provided",
        )

    item = db.get(ShoppingListItem, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    if item_data.amount is not None:
        item.amount = item_data.amount
    if item_data.is_checked is not None:
        item.is_checked = item_data.is_checked

    db.commit()
    publish_shopping_list_event(data={"item_id": item_id})
    return get_item_response(db, item_id)


@router.delete("/checked", status_code=status.HTTP_204_NO_CONTENT)
def delete_checked_items(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Remove all checked items."""
    deleted = (
        db.query(ShoppingListItem)
        .filter(ShoppingListItem.is_checked.is_(True))
        .delete(synchronize_session=False)
    )
    db.commit()
    publish_shopping_list_event(data={"deleted": deleted})


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a single item."""
    item = db.get(ShoppingListItem, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    db.delete(item)
    db.commit()
    publish_shopping_list_event(data={"item_id": item_id})
