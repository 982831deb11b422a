from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from mealplan.core.errors import NotFoundError, ValidationError
from mealplan.models import MealItem
from mealplan.services.repository import PlanRepository
from mealplan.utils.validators import require_positive

logger = logging.getLogger(__name__)


def _check_dish(repo: PlanRepository, dish_id: Optional[int]) -> None:
    # dish_id may be absent (plain water etc.)
    if dish_id is not None and repo.get_dish(dish_id) is None:
        raise NotFoundError("Dish", dish_id)


def insert_items(repo: PlanRepository, block_id: int, items: Sequence) -> List[MealItem]:
    """Insert ``items`` into a block; caller owns the unit of work."""
    created = []
    for entry in items:
        amount = require_positive(entry.amount, "amount")
        _check_dish(repo, entry.dish_id)
        created.append(repo.insert_item(block_id, entry.dish_id, amount, entry.note))
    return created


def add_item(
    repo: PlanRepository,
    block_id: int,
    dish_id: Optional[int],
    amount,
    note: Optional[str] = None,
) -> MealItem:
    amount = require_positive(amount, "amount")
    with repo.unit_of_work():
        if repo.get_block(block_id) is None:
            raise NotFoundError("Block", block_id)
        _check_dish(repo, dish_id)
        item = repo.insert_item(block_id, dish_id, amount, note)
        logger.info("Added item %s to block %s", item.id, block_id)
    return item


def update_item(
    repo: PlanRepository,
    item_id: int,
    amount=None,
    note: Optional[str] = None,
) -> MealItem:
    if amount is None and note is None:
        raise ValidationError("amount", "Nothing to update")
    if amount is not None:
        amount = require_positive(amount, "amount")
    with repo.unit_of_work():
        item = repo.get_item(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        item = repo.update_item(item, amount=amount, note=note)
    return item


def delete_item(repo: PlanRepository, item_id: int) -> None:
    with repo.unit_of_work():
        item = repo.get_item(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        repo.delete_item(item)
    logger.info("Deleted item %s", item_id)


def list_items(repo: PlanRepository, block_id: int) -> List[Dict[str, Any]]:
    """Items of a block with dish name, unit and per-100 rates joined in."""
    if repo.get_block(block_id) is None:
        raise NotFoundError("Block", block_id)
    rows = []
    for item in repo.list_items(block_id):
        dish = repo.get_dish(item.dish_id) if item.dish_id is not None else None
        rows.append({
            "id": item.id,
            "block_id": item.block_id,
            "dish_id": item.dish_id,
            "amount": item.amount,
            "note": item.note,
            "dish_name": dish.name if dish else None,
            "unit": dish.unit if dish else None,
            "calories_per_100": dish.calories_per_100 if dish else None,
            "proteins_per_100": dish.proteins_per_100 if dish else None,
            "fats_per_100": dish.fats_per_100 if dish else None,
            "carbs_per_100": dish.carbs_per_100 if dish else None,
        })
    return rows
