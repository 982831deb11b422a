from contextlib import suppress
from datetime import date
from typing import AsyncIterator, Iterator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlmodel import Session

from mealplan.core.config import Settings
from mealplan.core.database import create_db_engine, init_db
from mealplan.main import create_app
from mealplan.models import Dish
from mealplan.schemas import ItemIn
from mealplan.services.blocks import validate_and_save_block
from mealplan.services.plans import create_plan
from mealplan.services.repository import SqlPlanRepository


@pytest.fixture
def settings(tmp_path) -> Settings:
    # Fresh SQLite DB file in a temp dir per test for isolation
    return Settings(database_url=f"sqlite:///{(tmp_path / 'test.db').as_posix()}")


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    try:
        yield engine
    finally:
        with suppress(Exception):
            engine.dispose()


@pytest.fixture
def test_app(settings, engine) -> Iterator[FastAPI]:
    app = create_app(settings, engine=engine)
    yield app


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db_session(engine):
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def repo(db_session) -> SqlPlanRepository:
    return SqlPlanRepository(db_session)


@pytest.fixture
def seed(engine):
    """Persist rows in a short-lived session and return their ids."""

    def _seed(*rows):
        with Session(engine) as session:
            session.add_all(rows)
            session.flush()
            ids = [row.id for row in rows]
            session.commit()
        return ids

    return _seed


@pytest.fixture
def dishes(repo):
    oats = Dish(name="Овсянка", unit="г", calories_per_100=200, proteins_per_100=10,
                fats_per_100=5, carbs_per_100=30)
    soup = Dish(name="Суп", unit="мл", calories_per_100=40, proteins_per_100=2,
                fats_per_100=1.5, carbs_per_100=5)
    repo.session.add_all([oats, soup])
    repo.session.commit()
    return {"oats": oats, "soup": soup}


@pytest.fixture
def make_plan(repo):
    """Create a plan with blocks: [(type, start, end, [(dish_id, amount, note), ...]), ...]."""

    def _make(user_id=1, day=date(2025, 1, 1), blocks=()):
        plan = create_plan(repo, user_id, day)
        for block_type, start, end, items in blocks:
            validate_and_save_block(
                repo, plan.id, block_type, start, end,
                items=[ItemIn(dish_id=d, amount=a, note=n) for d, a, n in items],
            )
        return plan

    return _make
