from __future__ import annotations

from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

TimeValue = Union[str, int]


# ----------------------------
# Requests
# ----------------------------

class PlanCreate(BaseModel):
    user_id: int
    day: date


class PlanCopyRequest(BaseModel):
    source_plan_id: int
    target_plan_id: int


class ItemIn(BaseModel):
    dish_id: Optional[int] = None
    amount: Optional[float] = None
    note: Optional[str] = None


class BlockCreate(BaseModel):
    plan_id: int
    type: Optional[str] = None
    time_start: Optional[TimeValue] = None
    time_end: Optional[TimeValue] = None
    dishes: List[ItemIn] = []


class BlockUpdate(BaseModel):
    type: Optional[str] = None
    time_start: Optional[TimeValue] = None
    time_end: Optional[TimeValue] = None


class ItemCreate(ItemIn):
    block_id: int


class ItemUpdate(BaseModel):
    amount: Optional[float] = None
    note: Optional[str] = None


# ----------------------------
# Responses
# ----------------------------

class PlanRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    day: date


class ItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    block_id: int
    dish_id: Optional[int] = None
    amount: float
    note: Optional[str] = None


class ItemDetail(ItemRead):
    dish_name: Optional[str] = None
    unit: Optional[str] = None
    calories_per_100: Optional[float] = None
    proteins_per_100: Optional[float] = None
    fats_per_100: Optional[float] = None
    carbs_per_100: Optional[float] = None


class BlockRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plan_id: int
    type: str
    time_start: str
    time_end: str
    dishes: List[ItemRead] = []


class CopyResult(BaseModel):
    id: int
    message: str = "Plan copied"
    blocks_copied: int = 0
    items_copied: int = 0


class NutrientTotals(BaseModel):
    total_calories: int = 0
    total_proteins: int = 0
    total_fats: int = 0
    total_carbs: int = 0


class DishLine(BaseModel):
    dish_name: str
    amount: float
    unit: str
    # per-item values, rounded individually for display
    calories: int
    proteins: int
    fats: int
    carbs: int
    text: str


class MealTypeGroup(BaseModel):
    type: str
    label: str
    dishes: List[DishLine]
    text: str


class NutritionReport(NutrientTotals):
    plan_id: int
    meal_types: str
    groups: List[MealTypeGroup] = []
