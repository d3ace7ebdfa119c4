from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.schemas import DashboardPeriod, DashboardSummary
from clinicalcanvas.services.auth_service import TokenClaims, get_current_user
from clinicalcanvas.services.dashboard import DashboardAggregator

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
    period: DashboardPeriod = Query("month", description="'month' = calendar month, 'week' = last 7 days including today (UTC)"),
    db: AsyncSession = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return await DashboardAggregator(db).summary(current_user.user_id, period)
