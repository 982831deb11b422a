"""
Nutrition report for a meal plan.

Two rounding levels: each listed item shows its own nutrients rounded to
whole units, while the plan totals are the sum of the unrounded item values, rounded once.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List

from mealplan.core.errors import NotFoundError
from mealplan.schemas import DishLine, MealTypeGroup, NutritionReport
from mealplan.services.repository import PlanRepository
from mealplan.utils.nutrition import Nutrients, nutrients_for_amount, round_nutrients, sum_nutrients

logger = logging.getLogger(__name__)

MEAL_TYPE_LABELS: Dict[str, str] = {
    "breakfast": "Завтрак",
    "lunch": "Обед",
    "dinner": "Ужин",
    "snack": "Перекус",
}
EMPTY_LISTING = "Нет блюд"
SEPARATOR = " | "
DEFAULT_UNIT = "г"


def meal_type_label(block_type: str) -> str:
    return MEAL_TYPE_LABELS.get(block_type, block_type)


def _format_amount(amount: float) -> str:
    return format(Decimal(repr(amount)).normalize(), "f")


def _dish_line(name: str, amount: float, unit: str, shown: Nutrients) -> DishLine:
    values = [int(shown.calories), int(shown.proteins), int(shown.fats), int(shown.carbs)]
    text = f"{name} ({_format_amount(amount)} {unit}) [{', '.join(str(v) for v in values)}]"
    return DishLine(
        dish_name=name,
        amount=amount,
        unit=unit,
        calories=values[0],
        proteins=values[1],
        fats=values[2],
        carbs=values[3],
        text=text,
    )


def build_nutrition_report(repo: PlanRepository, plan_id: int) -> NutritionReport:
    """Per-meal-type listing and grand totals for ``plan_id``; read-only."""
    with repo.unit_of_work():
        if not repo.plan_exists(plan_id):
            raise NotFoundError("Plan", plan_id)

        unrounded: List[Nutrients] = []
        # Insertion order follows the earliest block of each type.
        lines_by_type: Dict[str, List[DishLine]] = {}

        for block in repo.list_blocks(plan_id, by_time=True):
            for item in repo.list_items(block.id):
                dish = repo.get_dish(item.dish_id) if item.dish_id is not None else None
                if dish is None:
                    # No dish (water, or a dish that no longer exists): zero contribution.
                    continue
                amounts = nutrients_for_amount(
                    dish.calories_per_100,
                    dish.proteins_per_100,
                    dish.fats_per_100,
                    dish.carbs_per_100,
                    item.amount,
                )
                unrounded.append(amounts)
                line = _dish_line(dish.name, item.amount, dish.unit or DEFAULT_UNIT, round_nutrients(amounts))
                lines_by_type.setdefault(block.type, []).append(line)

    groups = []
    for block_type, lines in lines_by_type.items():
        label = meal_type_label(block_type)
        groups.append(MealTypeGroup(
            type=block_type,
            label=label,
            dishes=lines,
            text=f"{label}: {SEPARATOR.join(line.text for line in lines)}",
        ))

    totals = round_nutrients(sum_nutrients(unrounded))
    listing = SEPARATOR.join(group.text for group in groups) if groups else EMPTY_LISTING
    logger.debug("Nutrition report for plan %s: %d groups", plan_id, len(groups))

    return NutritionReport(
        plan_id=plan_id,
        total_calories=int(totals.calories),
        total_proteins=int(totals.proteins),
        total_fats=int(totals.fats),
        total_carbs=int(totals.carbs),
        meal_types=listing,
        groups=groups,
    )
