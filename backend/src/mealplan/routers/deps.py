from fastapi import Depends
from sqlmodel import Session

from mealplan.core.database import get_session
from mealplan.services.repository import SqlPlanRepository


def get_repository(session: Session = Depends(get_session)) -> SqlPlanRepository:
    return SqlPlanRepository(session)
