from fastapi import APIRouter, Depends, Request

from ..services.dashboard_service import DashboardService
from .schemas.dashboard import DashboardStatsResponse
from .auth import get_current_user
from .dependencies import get_dashboard_service
from .utilities.limiter import limiter

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(get_current_user)])


@router.get("/stats", response_model=DashboardStatsResponse, summary="Totals, today's attendance, monthly income and a 7-day trend")
@limiter.limit("60/minute")
async def get_dashboard_stats(request: Request, service: DashboardService = Depends(get_dashboard_service)):
    return await service.get_stats()
