import threading
from datetime import date

import pytest
from sqlmodel import Session

from mealplan.core.errors import BlockOverlapError, NotFoundError, ValidationError
from mealplan.models import MealPlan
from mealplan.schemas import ItemIn
from mealplan.services.blocks import (
    check_interval,
    delete_block,
    list_blocks,
    update_block,
    validate_and_save_block,
)
from mealplan.services.repository import SqlPlanRepository
from mealplan.utils.intervals import TimeInterval


def test_touching_block_accepted_and_overlap_rejected(repo, make_plan):
    plan = make_plan(blocks=[("breakfast", "08:00", "09:00", [])])
    breakfast = repo.list_blocks(plan.id)[0]

    lunch = validate_and_save_block(repo, plan.id, "lunch", "09:00", "10:00")
    assert (lunch.time_start, lunch.time_end) == ("09:00", "10:00")

    with pytest.raises(BlockOverlapError) as info:
        validate_and_save_block(repo, plan.id, "snack", "08:30", "09:30")
    assert info.value.existing_block.id in {breakfast.id, lunch.id}
    assert info.value.details["new_block"] == {"type": "snack", "time_start": "08:30", "time_end": "09:30"}
    assert len(repo.list_blocks(plan.id)) == 2


def test_conflict_reports_the_overlapping_block(repo, make_plan):
    plan = make_plan(blocks=[("breakfast", "08:00", "09:00", [])])

    with pytest.raises(BlockOverlapError) as info:
        validate_and_save_block(repo, plan.id, "lunch", "08:30", "09:30")
    existing = info.value.details["existing_block"]
    assert existing["type"] == "breakfast"
    assert (existing["time_start"], existing["time_end"]) == ("08:00", "09:00")


def test_enclosing_interval_is_rejected(repo, make_plan):
    plan = make_plan(blocks=[("snack", "10:00", "10:30", [])])
    with pytest.raises(BlockOverlapError):
        validate_and_save_block(repo, plan.id, "lunch", "09:00", "12:00")


def test_times_are_normalised_before_saving(repo, make_plan):
    plan = make_plan()
    block = validate_and_save_block(repo, plan.id, "dinner", "7:05", 20 * 60)
    assert (block.time_start, block.time_end) == ("07:05", "20:00")


def test_update_to_own_interval_does_not_self_conflict(repo, make_plan):
    plan = make_plan(blocks=[("breakfast", "08:00", "09:00", [])])
    block = repo.list_blocks(plan.id)[0]

    updated = update_block(repo, block.id, "breakfast", "08:00", "09:00")
    assert updated.id == block.id
    assert check_interval(repo, plan.id, TimeInterval("08:00", "09:00"), exclude_block_id=block.id) is None

    widened = update_block(repo, block.id, "brunch", "07:30", "10:00")
    assert (widened.type, widened.time_start, widened.time_end) == ("brunch", "07:30", "10:00")


def test_update_into_another_block_is_rejected_and_leaves_block_unchanged(repo, make_plan):
    plan = make_plan(blocks=[
        ("breakfast", "08:00", "09:00", []),
        ("lunch", "12:00", "13:00", []),
    ])
    breakfast, lunch = repo.list_blocks(plan.id)

    with pytest.raises(BlockOverlapError) as info:
        update_block(repo, breakfast.id, "breakfast", "08:00", "12:30")
    assert info.value.existing_block.id == lunch.id

    reloaded = repo.get_block(breakfast.id)
    assert (reloaded.time_start, reloaded.time_end) == ("08:00", "09:00")


def test_update_with_block_from_another_plan_is_not_found(repo, make_plan):
    plan_a = make_plan(day=date(2025, 1, 1), blocks=[("breakfast", "08:00", "09:00", [])])
    plan_b = make_plan(day=date(2025, 1, 2))
    block = repo.list_blocks(plan_a.id)[0]

    with pytest.raises(NotFoundError):
        validate_and_save_block(repo, plan_b.id, "lunch", "12:00", "13:00", exclude_block_id=block.id)


def test_missing_plan_and_block_raise_not_found(repo):
    with pytest.raises(NotFoundError):
        validate_and_save_block(repo, 999, "lunch", "12:00", "13:00")
    with pytest.raises(NotFoundError):
        update_block(repo, 999, "lunch", "12:00", "13:00")
    with pytest.raises(NotFoundError):
        list_blocks(repo, 999)


@pytest.mark.parametrize(
    "block_type, start, end, field",
    [
        ("lunch", "noon", "13:00", "time_start"),
        ("lunch", "12:00", None, "time_end"),
        ("lunch", "13:00", "12:00", "time_end"),
        ("", "12:00", "13:00", "type"),
    ],
)
def test_malformed_input_is_a_validation_error(repo, make_plan, block_type, start, end, field):
    plan = make_plan()
    with pytest.raises(ValidationError) as info:
        validate_and_save_block(repo, plan.id, block_type, start, end)
    assert info.value.field == field
    assert repo.list_blocks(plan.id) == []


def test_initial_items_are_saved_with_the_block(repo, make_plan, dishes):
    plan = make_plan()
    block = validate_and_save_block(
        repo, plan.id, "breakfast", "08:00", "09:00",
        items=[ItemIn(dish_id=dishes["oats"].id, amount=150), ItemIn(amount=250, note="water")],
    )
    items = repo.list_items(block.id)
    assert [(i.dish_id, i.amount, i.note) for i in items] == [
        (dishes["oats"].id, 150.0, None),
        (None, 250.0, "water"),
    ]


def test_invalid_initial_item_rolls_back_the_block(repo, make_plan):
    plan = make_plan()
    with pytest.raises(ValidationError):
        validate_and_save_block(
            repo, plan.id, "breakfast", "08:00", "09:00",
            items=[ItemIn(amount=100, note="tea"), ItemIn(amount=0, note="bad")],
        )
    assert repo.list_blocks(plan.id) == []


def test_list_blocks_orders_by_start_time_and_delete_cascades(repo, make_plan, dishes):
    plan = make_plan(blocks=[
        ("dinner", "19:00", "20:00", []),
        ("breakfast", "08:00", "09:00", [(dishes["oats"].id, 100, None)]),
    ])
    ordered = list_blocks(repo, plan.id)
    assert [b.type for b in ordered] == ["breakfast", "dinner"]

    delete_block(repo, ordered[0].id)
    assert [b.type for b in list_blocks(repo, plan.id)] == ["dinner"]
    assert repo.list_items(ordered[0].id) == []
    with pytest.raises(NotFoundError):
        delete_block(repo, ordered[0].id)


def test_concurrent_overlapping_creates_admit_exactly_one(engine, seed):
    (plan_id,) = seed(MealPlan(user_id=5, day=date(2025, 3, 1)))
    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def worker(start, end):
        with Session(engine, expire_on_commit=False) as session:
            repo = SqlPlanRepository(session)
            barrier.wait()
            try:
                validate_and_save_block(repo, plan_id, "snack", start, end)
                result = "created"
            except BlockOverlapError:
                result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [
        threading.Thread(target=worker, args=("10:00", "11:00")),
        threading.Thread(target=worker, args=("10:30", "11:30")),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["conflict", "created"]
    with Session(engine) as session:
        assert len(SqlPlanRepository(session).list_blocks(plan_id)) == 1
