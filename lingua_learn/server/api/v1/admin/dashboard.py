"""
Admin Dashboard Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lingua_learn.core.database import get_session
from lingua_learn.core.database.entities import User
from lingua_learn.server.api.responses import success_response
from lingua_learn.server.services.dashboard import DashboardService
from lingua_learn.server.services.deps import require_admin

router = APIRouter(tags=["admin-dashboard"])
analytics_router = APIRouter(tags=["admin-dashboard"])


@router.get(
    "/summary",
    summary="Dashboard Summary",
    description="Content counts, learner progress over the last 30 days and system statistics.",
)
async def dashboard_summary(admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(await DashboardService(session).summary())


@router.get("/recent-activity", summary="Recent Activity")
async def recent_activity(
    limit: int = Query(default=10, ge=1, le=100),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return success_response(await DashboardService(session).recent_activity(limit))


@router.get(
    "/content-stats",
    summary="Content Engagement",
    description="The most active lessons and the completion rate of every learning path.",
)
async def content_stats(admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(await DashboardService(session).engagement_stats())


@analytics_router.get(
    "",
    summary="Analytics",
    description="User growth, exercise accuracy, quiz pass rate and the most popular learning paths.",
)
async def analytics(admin: User = Depends(require_admin), session: AsyncSession = Depends(get_session)):
    return success_response(await DashboardService(session).analytics())
