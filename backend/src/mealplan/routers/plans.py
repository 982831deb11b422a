from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from mealplan.schemas import CopyResult, NutritionReport, PlanCopyRequest, PlanCreate, PlanRead
from mealplan.services import plans as plan_service
from mealplan.services.nutrition_report import build_nutrition_report
from mealplan.services.plan_copy import copy_plan
from mealplan.services.repository import SqlPlanRepository

from .deps import get_repository

router = APIRouter(prefix="/meal_plans", tags=["meal_plans"])


@router.get("", response_model=List[PlanRead])
def list_plans(
    user_id: Optional[int] = Query(None),
    repo: SqlPlanRepository = Depends(get_repository),
):
    """Plans, newest date first; optionally only those of one user."""
    return plan_service.list_plans(repo, user_id)


@router.post("", response_model=PlanRead, status_code=201)
def create_plan(payload: PlanCreate, repo: SqlPlanRepository = Depends(get_repository)):
    return plan_service.create_plan(repo, payload.user_id, payload.day)


@router.post("/ensure", response_model=PlanRead, summary="Get the user's plan for a date, creating it if needed")
def ensure_plan(payload: PlanCreate, repo: SqlPlanRepository = Depends(get_repository)):
    return plan_service.ensure_plan(repo, payload.user_id, payload.day)


@router.post("/copy", response_model=CopyResult, summary="Replace a plan's blocks with a copy of another plan")
def copy(payload: PlanCopyRequest, repo: SqlPlanRepository = Depends(get_repository)):
    return copy_plan(repo, payload.source_plan_id, payload.target_plan_id)


@router.get("/{plan_id}", response_model=PlanRead)
def get_plan(plan_id: int, repo: SqlPlanRepository = Depends(get_repository)):
    return plan_service.get_plan(repo, plan_id)


@router.delete("/{plan_id}", status_code=204)
def delete_plan(plan_id: int, repo: SqlPlanRepository = Depends(get_repository)):
    plan_service.delete_plan(repo, plan_id)


@router.get("/{plan_id}/nutrition", response_model=NutritionReport)
def plan_nutrition(plan_id: int, repo: SqlPlanRepository = Depends(get_repository)):
    """Per-meal-type dish listing and calorie/protein/fat/carb totals."""
    return build_nutrition_report(repo, plan_id)
