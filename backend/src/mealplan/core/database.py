from __future__ import annotations

from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine
from starlette.requests import Request

from .config import Settings


def _sqlite_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # Required for SQLite when used with FastAPI in threaded servers.
        return {"check_same_thread": False}
    return {}


def _install_sqlite_hooks(engine: Engine, immediate: bool) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        if immediate:
            # Hand transaction control to SQLAlchemy so the BEGIN below is ours.
            dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    if immediate:
        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(settings: Settings) -> Engine:
    url = settings.database_url
    engine = create_engine(
        url,
        echo=settings.database_echo,
        connect_args=_sqlite_connect_args(url),
    )
    if url.startswith("sqlite"):
        _install_sqlite_hooks(engine, settings.sqlite_immediate_transactions)
    return engine


def init_db(engine: Engine) -> None:
    # Import models so SQLModel sees the metadata.
    from mealplan import models  # noqa: F401  (import for side effect)

    SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
    # Objects stay readable after commit for building the response.
    with Session(request.app.state.engine, expire_on_commit=False) as session:
        yield session

