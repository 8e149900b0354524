"""Ingredient API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recipebook.api.dependencies import get_current_user
from recipebook.database import get_db
from recipebook.models.category import Category
from recipebook.models.ingredient import Ingredient
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.models.user import User
from recipebook.schemas.ingredient import IngredientCreate, IngredientResponse, IngredientUpdate

router = APIRouter(prefix="/api/v1/ingredients", tags=["ingredients"])


def to_response(ingredient: Ingredient) -> IngredientResponse:
    """Build an ingredient response including the category name."""
    return IngredientResponse(
        id=ingredient.id,
        name=ingredient.name,
        unit=ingredient.unit,
        category_id=ingredient.category_id,
        category=ingredient.category.name if ingredient.category else None,
    )


def get_ingredient_or_404(db: Session, ingredient_id: int) -> Ingredient:
    """Get an ingredient by id."""
    ingredient = db.get(Ingredient, ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ingredient not found")
    return ingredient


def ensure_category_exists(db: Session, category_id: int | None) -> None:
    """Reject references to categories that do not exist."""
    if category_id is not None and db.get(Category, category_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown category")


def commit_or_conflict(db: Session) -> None:
    """Commit, translating a duplicate name into 409."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An ingredient with this name already exists",
        ) from None


@router.get("", response_model=list[IngredientResponse])
def get_ingredients(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all ingredients grouped by category order, then name."""
    ingredients = (
        db.query(Ingredient)
        .outerjoin(Category, Ingredient.category_id == Category.id)
        .order_by(Category.sort_order.is_(None), Category.sort_order, Ingredient.name)
        .all()
    )
    return [to_response(ingredient) for ingredient in ingredients]


@router.get("/{ingredient_id}", response_model=IngredientResponse)
def get_ingredient(
    ingredient_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific ingredient."""
    return to_response(get_ingredient_or_404(db, ingredient_id))


@router.post("", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
def create_ingredient(
    ingredient_data: IngredientCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new ingredient."""
    ensure_category_exists(db, ingredient_data.category_id)

    ingredient = Ingredient(
        name=ingredient_data.name,
        unit=ingredient_data.unit,
        category_id=ingredient_data.category_id,
    )
    db.add(ingredient)
    commit_or_conflict(db)
    db.refresh(ingredient)
    return to_response(ingredient)


@router.put("/{ingredient_id}", response_model=IngredientResponse)
def update_ingredient(
    ingredient_id: int,
    ingredient_data: IngredientUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update an ingredient."""
    ingredient = get_ingredient_or_404(db, ingredient_id)
    ensure_category_exists(db, ingredient_data.category_id)

    ingredient.name = ingredient_data.name
    ingredient.unit = ingredient_data.unit
    ingredient.category_id = ingredient_data.category_id

    commit_or_conflict(db)
    db.refresh(ingredient)
    return to_response(ingredient)


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ingredient(
    ingredient_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete an ingredient that no recipe uses anymore."""
    ingredient = get_ingredient_or_404(db, ingredient_id)

    recipe_count = (
        db.query(func.count(RecipeIngredient.recipe_id))
        .join(Recipe, Recipe.id == RecipeIngredient.recipe_id)
        .filter(
            RecipeIngredient.ingredient_id == ingredient_id,
            Recipe.deleted_at.is_(None),
        )
        .scalar()
    )
    if recipe_count > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ingredient is still used in {recipe_count} recipe(s)",
        )

    db.delete(ingredient)
    db.commit()
