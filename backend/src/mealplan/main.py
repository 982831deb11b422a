from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from starlette.requests import Request

from mealplan.core.config import Settings, get_settings
from mealplan.core.database import create_db_engine, init_db
from mealplan.core.errors import (
    ConflictError,
    MealPlanError,
    NotFoundError,
    ValidationError,
)
from mealplan.core.logs import configure_logging
from mealplan.routers import blocks, health, items, plans

logger = logging.getLogger(__name__)

RESOURCE_ROUTERS = (
    plans.router,
    blocks.router,
    items.router,
)

ERROR_STATUS = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def _status_for(exc: MealPlanError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
    )
    application.state.settings = settings
    application.state.engine = engine or create_db_engine(settings)

    @application.middleware("http")
    async def enforce_utf8_json(request: Request, call_next):
        response = await call_next(request)
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response

    @application.exception_handler(MealPlanError)
    async def meal_plan_error(request: Request, exc: MealPlanError):
        status = _status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content=exc.to_dict())

    @application.get("/favicon.ico", include_in_schema=False)
    def favicon():
        return Response(status_code=204)

    application.include_router(health.router, tags=["health"])
    for router in RESOURCE_ROUTERS:
        application.include_router(router, prefix=settings.api_prefix)

    @application.get("/", include_in_schema=False)
    def root():
        target = settings.docs_url or "/docs"
        return RedirectResponse(target)

    @application.get("/__dbcheck", include_in_schema=False)
    def dbcheck():
        return {"tables": inspect(application.state.engine).get_table_names()}

    @application.on_event("startup")
    def _startup():
        init_db(application.state.engine)

    return application


app = create_app()
