"""Recipe API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from recipebook.api.dependencies import get_current_user
from recipebook.database import get_db
from recipebook.models.category import Category
from recipebook.models.ingredient import Ingredient
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.models.user import User
from recipebook.schemas.recipe import (
    RecipeCreate,
    RecipeIngredientCreate,
    RecipeIngredientResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeUpdate,
)

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


def get_recipe_or_404(db: Session, recipe_id: int) -> Recipe:
    """Get a recipe that has not been deleted."""
    recipe = (
        db.query(Recipe)
        .filter(
            Recipe.id == recipe_id,
            Recipe.deleted_at.is_(None),
        )
        .first()
    )
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
    return recipe


def build_recipe_response(db: Session, recipe: Recipe) -> RecipeResponse:
    """Build a recipe response with ingredient lines in store order."""
    rows = (
        db.query(
            Ingredient.id,
            Ingredient.name,
            Ingredient.unit,
            Category.name,
            RecipeIngredient.amount,
        )
        .join(RecipeIngredient, RecipeIngredient.ingredient_id == Ingredient.id)
        .outerjoin(Category, Ingredient.category_id == Category.id)
        .filter(RecipeIngredient.recipe_id == recipe.id)
        .order_by(Category.sort_order.is_(None), Category.sort_order, Ingredient.name)
        .all()
    )

    return RecipeResponse(
        id=recipe.id,
        name=recipe.name,
        instructions=recipe.instructions,
        image_url=recipe.image_url,
        ingredients=[
            RecipeIngredientResponse(
                id=ingredient_id, name=name, unit=unit, category=category, amount=amount
            )
            for ingredient_id, name, unit, category, amount in rows
        ],
    )


def build_ingredient_lines(
    db: Session, ingredients_data: list[RecipeIngredientCreate]
) -> list[RecipeIngredient]:
    """Validate ingredient references and build recipe lines."""
    ingredient_ids = [line.ingredient_id for line in ingredients_data]
    if len(set(ingredient_ids)) != len(ingredient_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each ingredient may only appear once per recipe",
        )

    if ingredient_ids:
        known_ids = {
            ingredient_id
            for (ingredient_id,) in db.query(Ingredient.id)
            .filter(Ingredient.id.in_(ingredient_ids))
            .all()
        }
        unknown = sorted(set(ingredient_ids) - known_ids)
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown ingredient id(s): {unknown}",
            )

    return [
        RecipeIngredient(ingredient_id=line.ingredient_id, amount=line.amount)
        for line in ingredients_data
    ]


@router.get("", response_model=list[RecipeListResponse])
async def list_recipes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """List all recipes."""
    ingredient_counts = dict(
        db.query(RecipeIngredient.recipe_id, func.count(RecipeIngredient.ingredient_id))
        .group_by(RecipeIngredient.recipe_id)
        .all()
    )
    recipes = db.query(Recipe).filter(Recipe.deleted_at.is_(None)).order_by(Recipe.name).all()

    result = []
    for recipe in recipes:
        result.append(
            RecipeListResponse(
                id=recipe.id,
                name=recipe.name,
                instructions=recipe.instructions,
                image_url=recipe.image_url,
                ingredient_count=ingredient_counts.get(recipe.id, 0),
                created_at=recipe.created_at,
            )
        )
    return result


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    recipe_data: RecipeCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new recipe with its ingredient lines."""
    recipe = Recipe(
        name=recipe_data.name,
        instructions=recipe_data.instructions,
        image_url=recipe_data.image_url,
    )
    recipe.ingredients.extend(build_ingredient_lines(db, recipe_data.ingredients))

    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return build_recipe_response(db, recipe)


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific recipe with all ingredients."""
    recipe = get_recipe_or_404(db, recipe_id)
    return build_recipe_response(db, recipe)


@router.put("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: int,
    recipe_data: RecipeUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a recipe and replace its ingredient lines."""
    recipe = get_recipe_or_404(db, recipe_id)
    lines = build_ingredient_lines(db, recipe_data.ingredients)

    recipe.name = recipe_data.name
    recipe.instructions = recipe_data.instructions
    recipe.image_url = recipe_data.image_url

    # Remove old lines first so re-added ingredients don't collide on the composite key
    recipe.ingredients.clear()
    db.flush()
    recipe.ingredients.extend(lines)

    db.commit()
    db.refresh(recipe)
    return build_recipe_response(db, recipe)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Soft delete a recipe."""
    recipe = get_recipe_or_404(db, recipe_id)
    recipe.soft_delete()
    db.commit()
