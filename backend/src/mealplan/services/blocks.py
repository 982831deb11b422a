"""
Meal blocks: interval overlap validation and block mutations.

A block's interval is half-open, so a breakfast ending at 09:00 and a lunch
starting at 09:00 do not conflict. The overlap check runs in the same unit
of work as the insert/update, after the plan row has been locked, so two
concurrent writers cannot both pass the check.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from mealplan.core.errors import BlockOverlapError, NotFoundError
from mealplan.models import MealBlock
from mealplan.services.items import insert_items
from mealplan.services.repository import PlanRepository
from mealplan.utils.intervals import TimeInterval
from mealplan.utils.validators import require_text

logger = logging.getLogger(__name__)

TimeValue = Union[str, int, None]


def find_conflict(blocks: Iterable[MealBlock], candidate: TimeInterval) -> Optional[MealBlock]:
    """First block (in the given order) whose interval overlaps ``candidate``."""
    for block in blocks:
        if TimeInterval.of_block(block).overlaps(candidate):
            return block
    return None


def check_interval(
    repo: PlanRepository,
    plan_id: int,
    candidate: TimeInterval,
    exclude_block_id: Optional[int] = None,
) -> Optional[MealBlock]:
    """Return a conflicting block of ``plan_id`` or ``None`` if ``candidate`` fits."""
    existing = repo.list_blocks(plan_id, exclude_id=exclude_block_id)
    return find_conflict(existing, candidate)


def validate_and_save_block(
    repo: PlanRepository,
    plan_id: int,
    block_type: Optional[str],
    time_start: TimeValue,
    time_end: TimeValue,
    exclude_block_id: Optional[int] = None,
    items: Sequence = (),
) -> MealBlock:
    """
    Create a block, or update ``exclude_block_id`` when given, after checking
    the interval against every other block of the plan.

    ``items`` (objects with ``dish_id``, ``amount``, ``note``) are only used on
    create and are inserted in the same unit of work.

    Raises ValidationError, NotFoundError or BlockOverlapError; nothing is
    persisted in those cases.
    """
    block_type = require_text(block_type, "type")
    interval = TimeInterval.parse(time_start, time_end)

    with repo.unit_of_work():
        if repo.lock_plan(plan_id) is None:
            raise NotFoundError("Plan", plan_id)

        block = None
        if exclude_block_id is not None:
            block = repo.get_block(exclude_block_id)
            if block is None or block.plan_id != plan_id:
                raise NotFoundError("Block", exclude_block_id)

        conflict = check_interval(repo, plan_id, interval, exclude_block_id)
        if conflict is not None:
            logger.info(
                "Rejected %s %s on plan %s: overlaps block %s (%s %s-%s)",
                block_type, interval, plan_id,
                conflict.id, conflict.type, conflict.time_start, conflict.time_end,
            )
            raise BlockOverlapError(conflict, block_type, interval)

        if block is None:
            block = repo.insert_block(plan_id, block_type, interval)
            insert_items(repo, block.id, items)
            logger.info("Created block %s (%s %s) on plan %s", block.id, block_type, interval, plan_id)
        else:
            block = repo.update_block(block, block_type, interval)
            logger.info("Updated block %s to %s %s", block.id, block_type, interval)
    return block


def update_block(
    repo: PlanRepository,
    block_id: int,
    block_type: Optional[str],
    time_start: TimeValue,
    time_end: TimeValue,
) -> MealBlock:
    block = repo.get_block(block_id)
    if block is None:
        raise NotFoundError("Block", block_id)
    return validate_and_save_block(
        repo, block.plan_id, block_type, time_start, time_end, exclude_block_id=block_id
    )


def list_blocks(repo: PlanRepository, plan_id: int) -> List[MealBlock]:
    if not repo.plan_exists(plan_id):
        raise NotFoundError("Plan", plan_id)
    return repo.list_blocks(plan_id, by_time=True)


def delete_block(repo: PlanRepository, block_id: int) -> None:
    with repo.unit_of_work():
        block = repo.get_block(block_id)
        if block is None:
            raise NotFoundError("Block", block_id)
        repo.delete_block(block)
    logger.info("Deleted block %s", block_id)
