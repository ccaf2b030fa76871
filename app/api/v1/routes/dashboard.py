"""Dashboard API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Today
from app.core.database import get_db
from app.core.deps import CurrentUser
from app.schemas.common import DataResponse
from app.schemas.dashboard import DashboardStatistics
from app.services import dashboard as dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/statistics", response_model=DataResponse[DashboardStatistics])
async def get_statistics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    today: Today,
):
    """Headline counts, recent revenue and latest payments."""
    statistics = await dashboard_service.get_dashboard_statistics(db, today)
    return {"data": statistics}
