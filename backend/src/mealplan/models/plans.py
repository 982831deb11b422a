from datetime import date
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel, UniqueConstraint


class MealPlan(SQLModel, table=True):
    __tablename__ = "meal_plan"
    __table_args__ = (UniqueConstraint("user_id", "day", name="uq_plan_user_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    day: date = Field(index=True)

    blocks: List["MealBlock"] = Relationship(
        back_populates="plan",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class MealBlock(SQLModel, table=True):
    __tablename__ = "meal_block"

    id: Optional[int] = Field(default=None, primary_key=True)
    plan_id: int = Field(foreign_key="meal_plan.id", index=True, ondelete="CASCADE")
    # Open tag: breakfast | lunch | dinner | snack | anything else
    type: str = Field(index=True)
    # Zero-padded "HH:MM", half-open [time_start, time_end)
    time_start: str
    time_end: str

    plan: MealPlan = Relationship(back_populates="blocks")
    items: List["MealItem"] = Relationship(
        back_populates="block",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class MealItem(SQLModel, table=True):
    __tablename__ = "meal_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    block_id: int = Field(foreign_key="meal_block.id", index=True, ondelete="CASCADE")
    # None for entries without a dish, e.g. plain water
    dish_id: Optional[int] = Field(default=None, foreign_key="dish.id", index=True)
    amount: float
    note: Optional[str] = None

    block: MealBlock = Relationship(back_populates="items")
