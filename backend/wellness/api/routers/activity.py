from fastapi import APIRouter, Depends, status

from wellness.api.deps import get_storage
from wellness.schemas import (
    EventRecordReq, HealthSampleReq, JournalMetricsRecordReq, MeditationRecordReq, MoodRecordReq,
)
from wellness.services.dashboard_storage import DashboardStorage

# fire-and-forget appends: 202 even if storage drops the record
router = APIRouter(prefix="/activity", tags=["activity"])

ACCEPTED = {"status": "accepted"}

@router.post("/mood", status_code=status.HTTP_202_ACCEPTED)
async def record_mood(req: MoodRecordReq, storage: DashboardStorage = Depends(get_storage)):
    await storage.record_mood(req.mood)
    return ACCEPTED

@router.post("/meditation", status_code=status.HTTP_202_ACCEPTED)
async def record_meditation(req: MeditationRecordReq, storage: DashboardStorage = Depends(get_storage)):
    await storage.record_meditation(req.duration, req.type)
    return ACCEPTED

@router.post("/journal-metrics", status_code=status.HTTP_202_ACCEPTED)
async def record_journal_metrics(req: JournalMetricsRecordReq, storage: DashboardStorage = Depends(get_storage)):
    await storage.record_journal_metrics(req.word_count, req.categories)
    return ACCEPTED

@router.post("/health", status_code=status.HTTP_202_ACCEPTED)
async def record_health_sample(req: HealthSampleReq, storage: DashboardStorage = Depends(get_storage)):
    await storage.record_health_sample(req.heart_rate, req.steps)
    return ACCEPTED

@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
async def record_event(req: EventRecordReq, storage: DashboardStorage = Depends(get_storage)):
    await storage.record_event(req.screen, req.action)
    return ACCEPTED
