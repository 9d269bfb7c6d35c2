from fastapi import APIRouter, Depends
from app.api.deps import get_current_user, get_analytics_service
from app.models.user import User
from app.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    """Ticket counts for the caller: own tickets, assigned tickets, or everything for admins"""
    return await analytics.dashboard(current_user)


@router.get("/overview")
async def get_overview(
    current_user: User = Depends(get_current_user),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    """System-wide ticket, review and user metrics (agents and admins)"""
    return await analytics.overview(current_user)
