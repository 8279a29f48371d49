from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from wellness.api.deps import get_storage
from wellness.schemas import DashboardSnapshot, MoodTrend, StepSummary
from wellness.services.dashboard_storage import DashboardStorage

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("", response_model=DashboardSnapshot)
async def get_dashboard(
    now: Optional[datetime] = Query(None, description="reference time, defaults to server time"),
    storage: DashboardStorage = Depends(get_storage),
):
    """Last 7 days of activity plus streaks and totals. Never fails; empty data renders as zeros."""
    return await storage.get_dashboard_snapshot(now)

@router.get("/mood-trend", response_model=MoodTrend)
async def get_mood_trend(
    now: Optional[datetime] = Query(None),
    storage: DashboardStorage = Depends(get_storage),
):
    return await storage.get_mood_trend(now)

@router.get("/steps", response_model=StepSummary)
async def get_steps(
    now: Optional[datetime] = Query(None),
    live_steps: Optional[int] = Query(None, ge=0, description="live pedometer total for today"),
    storage: DashboardStorage = Depends(get_storage),
):
    return await storage.get_step_summary(now, live_steps=live_steps)
