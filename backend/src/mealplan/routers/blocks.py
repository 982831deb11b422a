from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from mealplan.models import MealBlock
from mealplan.schemas import BlockCreate, BlockRead, BlockUpdate, ItemRead
from mealplan.services import blocks as block_service
from mealplan.services.repository import SqlPlanRepository

from .deps import get_repository

router = APIRouter(prefix="/meal_blocks", tags=["meal_blocks"])


def _block_read(repo: SqlPlanRepository, block: MealBlock) -> BlockRead:
    dishes = [ItemRead.model_validate(i) for i in repo.list_items(block.id)]
    return BlockRead(
        id=block.id,
        plan_id=block.plan_id,
        type=block.type,
        time_start=block.time_start,
        time_end=block.time_end,
        dishes=dishes,
    )


@router.get("", response_model=List[BlockRead])
def list_blocks(plan_id: int = Query(...), repo: SqlPlanRepository = Depends(get_repository)):
    """Blocks of a plan ordered by start time."""
    return [_block_read(repo, b) for b in block_service.list_blocks(repo, plan_id)]


@router.post("", response_model=BlockRead, status_code=201)
def create_block(payload: BlockCreate, repo: SqlPlanRepository = Depends(get_repository)):
    block = block_service.validate_and_save_block(
        repo,
        payload.plan_id,
        payload.type,
        payload.time_start,
        payload.time_end,
        items=payload.dishes,
    )
    return _block_read(repo, block)


@router.put("/{block_id}", response_model=BlockRead)
def update_block(block_id: int, payload: BlockUpdate, repo: SqlPlanRepository = Depends(get_repository)):
    block = block_service.update_block(
        repo, block_id, payload.type, payload.time_start, payload.time_end
    )
    return _block_read(repo, block)


@router.delete("/{block_id}", status_code=204)
def delete_block(block_id: int, repo: SqlPlanRepository = Depends(get_repository)):
    block_service.delete_block(repo, block_id)
