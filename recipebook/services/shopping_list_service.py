"""Shopping list service for merging recipe selections into the shopping list."""

import logging
import time
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from recipebook.config import get_settings
from recipebook.models.ingredient import Ingredient
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.models.shopping_list_item import ShoppingListItem
from recipebook.services.realtime import publish_shopping_list_event

logger = logging.getLogger(__name__)

# Lock contention errors that are safe to retry with a fresh transaction
TRANSIENT_ERROR_MARKERS = (
    "database is locked",
    "database is busy",
    "deadlock detected",
    "could not serialize access",
)


@dataclass(frozen=True)
class IngredientLine:
    """One ingredient line of a recipe, as read from the recipe store."""

    recipe_id: int
    ingredient_id: int
    amount: Decimal


def validate_selection(recipe_ids: Sequence[int]) -> None:
    """Reject anything that is not a non-empty list of integer recipe ids."""
    if not isinstance(recipe_ids, list | tuple) or len(recipe_ids) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Expected a non-empty list of recipe ids",
        )
    if not all(isinstance(r, int) and not isinstance(r, bool) for r in recipe_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Recipe ids must be integers",
        )


def count_selection(recipe_ids: Iterable[int]) -> Counter:
    """Count how often each recipe was selected."""
    return Counter(recipe_ids)


def aggregate_ingredient_totals(
    lines: Iterable[IngredientLine], counts: Counter
) -> dict[int, Decimal]:
    """Sum amount x selection count per ingredient across all recipe lines."""
    totals: dict[int, Decimal] = defaultdict(Decimal)
    for line in lines:
        totals[line.ingredient_id] += Decimal(line.amount) * counts[line.recipe_id]
    return dict(totals)


def is_transient_error(error: OperationalError) -> bool:
    """Check whether a database error was caused by lock contention."""
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


class ShoppingListService:
    """Service for shopping list operations."""

    def __init__(
        self,
        db: Session,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.max_retries = settings.generation_max_retries if max_retries is None else max_retries
        self.retry_delay = (
            settings.generation_retry_delay_seconds if retry_delay is None else retry_delay
        )

    def generate_from_selection(self, recipe_ids: Sequence[int]) -> dict:
        """
        Merge the ingredients of the selected recipes into the shopping list.

        A recipe id listed n times contributes n times its ingredient amounts.
        The merge is additive: running the same selection twice doubles the
        amounts. Touched rows are unchecked, untouched rows are left alone.

        Returns:
            {
                "message": str,
                "recipes_selected": int,
                "ingredients_updated": int,
            }
        """
        validate_selection(recipe_ids)
        counts = count_selection(recipe_ids)

        for attempt in range(self.max_retries + 1):
            try:
                totals = self._merge_selection(counts)
                self.db.commit()
                break
            except OperationalError as e:
                self.db.rollback()
                if is_transient_error(e) and attempt < self.max_retries:
                    logger.warning(
                        f"Shopping list generation hit lock contention "
                        f"(attempt {attempt + 1}/{self.max_retries + 1}): {e}"
                    )
                    time.sleep(self.retry_delay)
                    continue
                logger.exception("Shopping list generation failed")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Failed to update shopping list: {e}",
                ) from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception("Shopping list generation failed")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Failed to update shopping list: {e}",
                ) from e

        publish_shopping_list_event(data={"ingredient_ids": sorted(totals)})
        logger.info(
            f"Merged {len(counts)} recipes ({len(recipe_ids)} selections) "
            f"into {len(totals)} shopping list items"
        )

        return {
            "message": "Shopping list updated successfully.",
            "recipes_selected": len(counts),
            "ingredients_updated": len(totals),
        }

    def get_ingredient_lines(self, recipe_ids: set[int]) -> list[IngredientLine]:
        """Load the ingredient lines of all given recipes in one query.

        Unknown and soft-deleted recipes yield no lines.
        """
        if not recipe_ids:
            return []

        rows = (
            self.db.query(
                RecipeIngredient.recipe_id,
                RecipeIngredient.ingredient_id,
                RecipeIngredient.amount,
            )
            .join(Recipe, Recipe.id == RecipeIngredient.recipe_id)
            .filter(
                RecipeIngredient.recipe_id.in_(recipe_ids),
                Recipe.deleted_at.is_(None),
            )
            .all()
        )
        return [
            IngredientLine(recipe_id=recipe_id, ingredient_id=ingredient_id, amount=amount)
            for recipe_id, ingredient_id, amount in rows
        ]

    def upsert_accumulate(
        self, ingredient_id: int, amount: Decimal, unit: str | None = None
    ) -> None:
        """Insert a row for the ingredient, or add to the existing row's amount.

        Runs as a single INSERT ... ON CONFLICT statement inside the caller's
        transaction, so concurrent merges into the same row serialize on the
        row lock. An existing row is always unchecked again; ``unit`` is only
        used when the row is created.
        """
        insert = self._dialect_insert()
        stmt = insert(ShoppingListItem).values(
            ingredient_id=ingredient_id,
            amount=amount,
            is_checked=False,
            unit=unit,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["ingredient_id"],
            set_={
                "amount": ShoppingListItem.amount + stmt.excluded.amount,
                "is_checked": False,
                "updated_at": func.now(),
            },
        )
        self.db.execute(stmt)

    def insert_or_accumulate(
        self, ingredient_id: int, amount: Decimal, unit: str | None = None
    ) -> bool:
        """Insert a row for the ingredient, or add to and uncheck the existing one.

        Returns True when this call created the row, as reported by the insert
        statement itself. Runs inside the caller's transaction.
        """
        insert = self._dialect_insert()
        while True:
            stmt = (
                insert(ShoppingListItem)
                .values(ingredient_id=ingredient_id, amount=amount, is_checked=False, unit=unit)
                .on_conflict_do_nothing(index_elements=["ingredient_id"])
            )
            if self.db.execute(stmt).rowcount == 1:
                return True

            updated = (
                self.db.query(ShoppingListItem)
                .filter(ShoppingListItem.ingredient_id == ingredient_id)
                .update(
                    {
                        ShoppingListItem.amount: ShoppingListItem.amount + amount,
                        ShoppingListItem.is_checked: False,
                    },
                    synchronize_session=False,
                )
            )
            if updated == 1:
                return False
            # Row was deleted between the two statements; insert again

    def add_item(
        self, ingredient_id: int, amount: Decimal, unit: str | None = None
    ) -> tuple[ShoppingListItem, bool]:
        """
        Manually add an ingredient amount to the shopping list.

        Returns: (item, created)
        """
        ingredient = self.db.get(Ingredient, ingredient_id)
        if not ingredient:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ingredient not found")

        created = self.insert_or_accumulate(ingredient_id, amount, unit)
        self.db.commit()
        publish_shopping_list_event(data={"ingredient_ids": [ingredient_id]})

        item = (
            self.db.query(ShoppingListItem)
            .filter(ShoppingListItem.ingredient_id == ingredient_id)
            .one()
        )
        return item, created

    def _merge_selection(self, counts: Counter) -> dict[int, Decimal]:
        """Read, accumulate and upsert within the current transaction."""
        lines = self.get_ingredient_lines(set(counts))
        totals = aggregate_ingredient_totals(lines, counts)

        # Fixed key order keeps concurrent merges from deadlocking each other
        for ingredient_id in sorted(totals):
            self.upsert_accumulate(ingredient_id, totals[ingredient_id])

        return totals

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise RuntimeError(f"Shopping list upsert is not supported on {dialect}")
