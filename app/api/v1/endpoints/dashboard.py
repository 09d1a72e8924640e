from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.services.dashboard_service import DashboardService
from app.schemas.dashboard import DashboardSummary
from app.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("/summary", response_model=SuccessResponse[DashboardSummary])
async def get_dashboard_summary(db: AsyncSession = Depends(deps.get_db)) -> Any:
    """
    Sign ups, revenue and outstanding balances for the dashboard cards.
    """
    summary = await DashboardService.get_summary(db)
    return SuccessResponse(data=summary)
