from typing import Optional
from sqlmodel import SQLModel, Field


class Dish(SQLModel, table=True):
    """Dish master data; rates are per 100 units of ``unit``."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    unit: str = "г"
    calories_per_100: Optional[float] = None
    proteins_per_100: Optional[float] = None
    fats_per_100: Optional[float] = None
    carbs_per_100: Optional[float] = None
