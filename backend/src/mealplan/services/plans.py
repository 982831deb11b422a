from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from mealplan.core.errors import NotFoundError, PersistenceError, PlanExistsError
from mealplan.models import MealPlan
from mealplan.services.repository import PlanRepository

logger = logging.getLogger(__name__)


def create_plan(repo: PlanRepository, user_id: int, day: date) -> MealPlan:
    """One plan per user and date; a second one raises PlanExistsError."""
    try:
        with repo.unit_of_work():
            if repo.find_plan(user_id, day) is not None:
                raise PlanExistsError(user_id, day)
            plan = repo.insert_plan(user_id, day)
    except PersistenceError as exc:
        # Lost a race against a concurrent insert; the unique index decided.
        if isinstance(exc.__cause__, IntegrityError):
            raise PlanExistsError(user_id, day) from exc
        raise
    logger.info("Created plan %s for user %s on %s", plan.id, user_id, day)
    return plan


def ensure_plan(repo: PlanRepository, user_id: int, day: date) -> MealPlan:
    """Return the user's plan for ``day``, creating it on demand."""
    plan = repo.find_plan(user_id, day)
    if plan is not None:
        return plan
    try:
        return create_plan(repo, user_id, day)
    except PlanExistsError:
        return repo.find_plan(user_id, day)


def get_plan(repo: PlanRepository, plan_id: int) -> MealPlan:
    plan = repo.get_plan(plan_id)
    if plan is None:
        raise NotFoundError("Plan", plan_id)
    return plan


def list_plans(repo: PlanRepository, user_id: Optional[int] = None) -> List[MealPlan]:
    return repo.list_plans(user_id)


def delete_plan(repo: PlanRepository, plan_id: int) -> None:
    with repo.unit_of_work():
        plan = repo.get_plan(plan_id)
        if plan is None:
            raise NotFoundError("Plan", plan_id)
        repo.delete_plan(plan)
    logger.info("Deleted plan %s", plan_id)
