from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from mealplan.schemas import ItemCreate, ItemDetail, ItemRead, ItemUpdate
from mealplan.services import items as item_service
from mealplan.services.repository import SqlPlanRepository

from .deps import get_repository

router = APIRouter(prefix="/meal_items", tags=["meal_items"])


@router.get("", response_model=List[ItemDetail])
def list_items(block_id: int = Query(...), repo: SqlPlanRepository = Depends(get_repository)):
    return item_service.list_items(repo, block_id)


@router.post("", response_model=ItemRead, status_code=201)
def add_item(payload: ItemCreate, repo: SqlPlanRepository = Depends(get_repository)):
    """Add a dish (or a bare note such as water, without dish_id) to a block."""
    return item_service.add_item(repo, payload.block_id, payload.dish_id, payload.amount, payload.note)


@router.put("/{item_id}", response_model=ItemRead)
def update_item(item_id: int, payload: ItemUpdate, repo: SqlPlanRepository = Depends(get_repository)):
    return item_service.update_item(repo, item_id, amount=payload.amount, note=payload.note)


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: int, repo: SqlPlanRepository = Depends(get_repository)):
    item_service.delete_item(repo, item_id)
