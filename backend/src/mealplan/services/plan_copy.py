"""
Copy every block and item of one plan onto another.

A copy fully replaces the target's blocks. The source block set was
overlap-checked when it was built, and the target is emptied first, so the
blocks are inserted without going through the overlap validator. The whole
replace runs in one unit of work: on any failure the target keeps exactly
the blocks and items it had before the call.
"""

from __future__ import annotations

import logging

from mealplan.core.errors import CopyFailedError, NotFoundError, TargetNotFoundError
from mealplan.schemas import CopyResult
from mealplan.services.repository import PlanRepository
from mealplan.utils.intervals import TimeInterval

logger = logging.getLogger(__name__)


def copy_plan(repo: PlanRepository, source_plan_id: int, target_plan_id: int) -> CopyResult:
    """
    Replace the blocks of ``target_plan_id`` with copies of those of
    ``source_plan_id``.

    A missing or empty source leaves the target with no blocks. Copying a
    plan onto itself changes nothing.

    Raises TargetNotFoundError if the target plan does not exist and
    CopyFailedError for anything else that goes wrong; in both cases nothing
    is persisted.
    """
    try:
        with repo.unit_of_work():
            if repo.lock_plan(target_plan_id) is None:
                raise TargetNotFoundError(target_plan_id)
            if source_plan_id == target_plan_id:
                blocks = repo.list_blocks(target_plan_id)
                return CopyResult(
                    id=target_plan_id,
                    blocks_copied=len(blocks),
                    items_copied=sum(len(repo.list_items(b.id)) for b in blocks),
                )

            removed = repo.delete_blocks(target_plan_id)

            # Both sides in id order: source block i maps to created block i.
            source_blocks = repo.list_blocks(source_plan_id)
            created = [
                repo.insert_block(target_plan_id, block.type, TimeInterval.of_block(block))
                for block in source_blocks
            ]
            if len(repo.list_blocks(target_plan_id)) != len(source_blocks):
                raise RuntimeError("target block count does not match source")

            items_copied = 0
            for old_block, new_block in zip(source_blocks, created):
                for item in repo.list_items(old_block.id):
                    repo.insert_item(new_block.id, item.dish_id, item.amount, item.note)
                    items_copied += 1

            logger.info(
                "Copied plan %s onto %s: %d blocks, %d items (replaced %d blocks)",
                source_plan_id, target_plan_id, len(created), items_copied, removed,
            )
            return CopyResult(
                id=target_plan_id,
                blocks_copied=len(created),
                items_copied=items_copied,
            )
    except NotFoundError:
        raise
    except Exception as exc:
        logger.exception("Copying plan %s onto %s failed", source_plan_id, target_plan_id)
        raise CopyFailedError() from exc
