from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wellness.api.deps import get_storage
from wellness.schemas import TherapySession, TherapySessionCreate, TherapyStatusUpdate
from wellness.services.dashboard_storage import (
    DashboardStorage, InvalidStatusTransitionError, PastSlotError, SlotUnavailableError, StorageError,
)

router = APIRouter(prefix="/therapy-sessions", tags=["therapy"])

@router.get("", response_model=List[TherapySession])
async def list_sessions(
    include_cancelled: bool = Query(False),
    storage: DashboardStorage = Depends(get_storage),
):
    """Booked sessions ordered by appointment time; cancelled ones are hidden unless asked for."""
    return await storage.get_therapy_sessions(include_cancelled=include_cancelled)

@router.post("", response_model=TherapySession, status_code=status.HTTP_201_CREATED)
async def book_session(req: TherapySessionCreate, storage: DashboardStorage = Depends(get_storage)):
    try:
        session = await storage.book_therapy_session(req)
    except PastSlotError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to book session")

    await storage.record_event("SessionsScreen", "bookSession")
    return session

@router.patch("/{session_id}/status", response_model=TherapySession)
async def update_status(
    session_id: str,
    req: TherapyStatusUpdate,
    storage: DashboardStorage = Depends(get_storage),
):
    try:
        session = await storage.update_therapy_session_status(session_id, req.status)
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to update session")

    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    return session

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, storage: DashboardStorage = Depends(get_storage)):
    try:
        deleted = await storage.delete_therapy_session(session_id)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to delete session")
    if not deleted:
        raise HTTPException(status_code=404, detail="session not found")

    await storage.record_event("SessionsScreen", "deleteSession")
    return
