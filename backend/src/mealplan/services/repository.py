"""Repository port for plans, blocks and items, and its SQLModel adapter.

Services depend on the ``PlanRepository`` protocol only; the HTTP layer
constructs a ``SqlPlanRepository`` around the request's session and passes
it in. All multi-step mutations run inside ``unit_of_work()``, which commits
on a clean exit and rolls back on any exception.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional, Protocol

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from mealplan.core.errors import MealPlanError, PersistenceError
from mealplan.models import Dish, MealBlock, MealItem, MealPlan
from mealplan.utils.intervals import TimeInterval

logger = logging.getLogger(__name__)


class PlanRepository(Protocol):
    """Persistence operations the scheduling, copy and nutrition services use."""

    def unit_of_work(self): ...

    # plans
    def plan_exists(self, plan_id: int) -> bool: ...
    def get_plan(self, plan_id: int) -> Optional[MealPlan]: ...
    def lock_plan(self, plan_id: int) -> Optional[MealPlan]: ...
    def find_plan(self, user_id: int, day: date) -> Optional[MealPlan]: ...
    def list_plans(self, user_id: Optional[int] = None) -> List[MealPlan]: ...
    def insert_plan(self, user_id: int, day: date) -> MealPlan: ...
    def delete_plan(self, plan: MealPlan) -> None: ...

    # blocks
    def get_block(self, block_id: int) -> Optional[MealBlock]: ...
    def list_blocks(
        self, plan_id: int, exclude_id: Optional[int] = None, by_time: bool = False
    ) -> List[MealBlock]: ...
    def insert_block(self, plan_id: int, block_type: str, interval: TimeInterval) -> MealBlock: ...
    def update_block(self, block: MealBlock, block_type: str, interval: TimeInterval) -> MealBlock: ...
    def delete_block(self, block: MealBlock) -> None: ...
    def delete_blocks(self, plan_id: int) -> int: ...

    # items
    def get_item(self, item_id: int) -> Optional[MealItem]: ...
    def list_items(self, block_id: int) -> List[MealItem]: ...
    def insert_item(
        self, block_id: int, dish_id: Optional[int], amount: float, note: Optional[str] = None
    ) -> MealItem: ...
    def update_item(
        self, item: MealItem, amount: Optional[float] = None, note: Optional[str] = None
    ) -> MealItem: ...
    def delete_item(self, item: MealItem) -> None: ...

    # dishes (read-only)
    def get_dish(self, dish_id: int) -> Optional[Dish]: ...


class SqlPlanRepository:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def unit_of_work(self) -> Iterator["SqlPlanRepository"]:
        try:
            yield self
            self.session.commit()
        except MealPlanError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Transaction rolled back: %s", exc)
            raise PersistenceError() from exc
        except BaseException:
            self.session.rollback()
            raise

    # ----------------------------
    # Plans
    # ----------------------------

    def plan_exists(self, plan_id: int) -> bool:
        return self.session.exec(select(MealPlan.id).where(MealPlan.id == plan_id)).first() is not None

    def get_plan(self, plan_id: int) -> Optional[MealPlan]:
        return self.session.get(MealPlan, plan_id)

    def lock_plan(self, plan_id: int) -> Optional[MealPlan]:
        # FOR UPDATE serialises block writers per plan; SQLite relies on BEGIN IMMEDIATE.
        stmt = select(MealPlan).where(MealPlan.id == plan_id).with_for_update()
        return self.session.exec(stmt).first()

    def find_plan(self, user_id: int, day: date) -> Optional[MealPlan]:
        stmt = select(MealPlan).where(MealPlan.user_id == user_id, MealPlan.day == day)
        return self.session.exec(stmt).first()

    def list_plans(self, user_id: Optional[int] = None) -> List[MealPlan]:
        stmt = select(MealPlan)
        if user_id is not None:
            stmt = stmt.where(MealPlan.user_id == user_id)
        stmt = stmt.order_by(MealPlan.day.desc(), MealPlan.id.asc())
        return list(self.session.exec(stmt).all())

    def insert_plan(self, user_id: int, day: date) -> MealPlan:
        plan = MealPlan(user_id=user_id, day=day)
        self.session.add(plan)
        self.session.flush()
        return plan

    def delete_plan(self, plan: MealPlan) -> None:
        # ORM cascade removes blocks and their items.
        self.session.delete(plan)
        self.session.flush()

    # ----------------------------
    # Blocks
    # ----------------------------

    def get_block(self, block_id: int) -> Optional[MealBlock]:
        return self.session.get(MealBlock, block_id)

    def list_blocks(
        self, plan_id: int, exclude_id: Optional[int] = None, by_time: bool = False
    ) -> List[MealBlock]:
        stmt = select(MealBlock).where(MealBlock.plan_id == plan_id)
        if exclude_id is not None:
            stmt = stmt.where(MealBlock.id != exclude_id)
        if by_time:
            stmt = stmt.order_by(MealBlock.time_start.asc(), MealBlock.id.asc())
        else:
            stmt = stmt.order_by(MealBlock.id.asc())
        return list(self.session.exec(stmt).all())

    def insert_block(self, plan_id: int, block_type: str, interval: TimeInterval) -> MealBlock:
        block = MealBlock(
            plan_id=plan_id,
            type=block_type,
            time_start=interval.start,
            time_end=interval.end,
        )
        self.session.add(block)
        self.session.flush()
        return block

    def update_block(self, block: MealBlock, block_type: str, interval: TimeInterval) -> MealBlock:
        block.type = block_type
        block.time_start = interval.start
        block.time_end = interval.end
        self.session.add(block)
        self.session.flush()
        return block

    def delete_block(self, block: MealBlock) -> None:
        self.session.delete(block)
        self.session.flush()

    def delete_blocks(self, plan_id: int) -> int:
        """Bulk-delete every block of a plan together with its items."""
        block_ids = select(MealBlock.id).where(MealBlock.plan_id == plan_id)
        self.session.exec(
            delete(MealItem)
            .where(MealItem.block_id.in_(block_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(
            delete(MealBlock)
            .where(MealBlock.plan_id == plan_id)
            .execution_options(synchronize_session=False)
        )
        # Bulk deletes bypass the identity map; drop stale objects.
        self.session.expire_all()
        return result.rowcount or 0

    # ----------------------------
    # Items
    # ----------------------------

    def get_item(self, item_id: int) -> Optional[MealItem]:
        return self.session.get(MealItem, item_id)

    def list_items(self, block_id: int) -> List[MealItem]:
        stmt = select(MealItem).where(MealItem.block_id == block_id).order_by(MealItem.id.asc())
        return list(self.session.exec(stmt).all())

    def insert_item(
        self, block_id: int, dish_id: Optional[int], amount: float, note: Optional[str] = None
    ) -> MealItem:
        item = MealItem(block_id=block_id, dish_id=dish_id, amount=amount, note=note)
        self.session.add(item)
        self.session.flush()
        return item

    def update_item(
        self, item: MealItem, amount: Optional[float] = None, note: Optional[str] = None
    ) -> MealItem:
        if amount is not None:
            item.amount = amount
        if note is not None:
            item.note = note
        self.session.add(item)
        self.session.flush()
        return item

    def delete_item(self, item: MealItem) -> None:
        self.session.delete(item)
        self.session.flush()

    # ----------------------------
    # Dishes
    # ----------------------------

    def get_dish(self, dish_id: int) -> Optional[Dish]:
        return self.session.get(Dish, dish_id)
