from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional


@dataclass
class Nutrients:
    calories: float = 0.0
    proteins: float = 0.0
    fats: float = 0.0
    carbs: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "calories": float(self.calories),
            "proteins": float(self.proteins),
            "fats": float(self.fats),
            "carbs": float(self.carbs),
        }


def nutrients_for_amount(
    calories_per_100: Optional[float],
    proteins_per_100: Optional[float],
    fats_per_100: Optional[float],
    carbs_per_100: Optional[float],
    amount: float,
) -> Nutrients:
    """Compute absolute nutrients for ``amount`` units from per-100 rates.

    - Missing rates count as 0.0
    - Negative amounts are clamped to 0
    """
    factor = max(0.0, float(amount or 0.0)) / 100.0

    def f(x: Optional[float]) -> float:
        return float(x) if x is not None else 0.0

    return Nutrients(
        calories=f(calories_per_100) * factor,
        proteins=f(proteins_per_100) * factor,
        fats=f(fats_per_100) * factor,
        carbs=f(carbs_per_100) * factor,
    )


def sum_nutrients(items: Iterable[Nutrients]) -> Nutrients:
    total = Nutrients()
    for it in items:
        total.calories += it.calories
        total.proteins += it.proteins
        total.fats += it.fats
        total.carbs += it.carbs
    return total


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 away from zero (SQL ROUND semantics)."""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_nutrients(n: Nutrients) -> Nutrients:
    return Nutrients(
        calories=round_half_up(n.calories),
        proteins=round_half_up(n.proteins),
        fats=round_half_up(n.fats),
        carbs=round_half_up(n.carbs),
    )
