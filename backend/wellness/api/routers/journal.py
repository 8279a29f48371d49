from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from wellness.api.deps import get_storage
from wellness.schemas import JournalEntry, JournalEntryIn
from wellness.services.aggregation import to_millis
from wellness.services.dashboard_storage import DashboardStorage, StorageError

router = APIRouter(prefix="/journal", tags=["journal"])

def _build_entry(entry_id: str, req: JournalEntryIn, now: datetime) -> JournalEntry:
    return JournalEntry(
        id=entry_id,
        title=req.title.strip(),
        content=req.content.strip(),
        date=now.date().isoformat(),
        time=now.strftime("%H:%M"),
        timestamp=to_millis(now),
        mood=req.mood,
        categories=req.categories,
    )

@router.get("", response_model=List[JournalEntry])
async def list_entries(storage: DashboardStorage = Depends(get_storage)):
    return await storage.get_journal_entries()

@router.post("", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(req: JournalEntryIn, storage: DashboardStorage = Depends(get_storage)):
    now = datetime.now()
    entry = _build_entry(str(to_millis(now)), req, now)
    try:
        saved = await storage.save_journal_entry(entry)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to save journal entry")
    await storage.record_event("JournalScreen", "saveEntry")
    return saved

@router.put("/{entry_id}", response_model=JournalEntry)
async def update_entry(entry_id: str, req: JournalEntryIn, storage: DashboardStorage = Depends(get_storage)):
    existing = await storage.get_journal_entries()
    if not any(e.id == entry_id for e in existing):
        raise HTTPException(status_code=404, detail="journal entry not found")

    entry = _build_entry(entry_id, req, datetime.now())
    try:
        saved = await storage.save_journal_entry(entry)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to save journal entry")
    await storage.record_event("JournalScreen", "updateEntry")
    return saved

@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: str, storage: DashboardStorage = Depends(get_storage)):
    try:
        deleted = await storage.delete_journal_entry(entry_id)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to delete journal entry")
    if not deleted:
        raise HTTPException(status_code=404, detail="journal entry not found")
    return
