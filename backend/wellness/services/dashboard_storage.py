"""
Per-user wellness history on top of a key-value store.

Each record kind lives under its own key as one JSON array. Appends read the
whole array, add the record and write the whole array back. Appends to the
same key are serialized with a per-key lock so concurrent writers in this
process never lose a record.

``record_*`` calls are best effort: a storage failure is logged and the
record is dropped. Dashboard reads never raise; anything unreadable counts
as an empty collection.
"""
from __future__ import annotations
import asyncio
import json
import logging
import time
import weakref
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from wellness.schemas import (
    AnalyticsEvent, ChatMessage, DashboardSnapshot, HealthMetrics, JournalEntry,
    JournalMetrics, MeditationSession, MeditationType, MoodEntry, MoodTrend, StepSummary,
    PreferencesUpdate, ProfileUpdate, TherapySession, TherapySessionCreate, TherapySessionStatus,
    UserProfile,
)
from wellness.services import seed_data
from wellness.services.aggregation import (
    compute_stats, filter_recent, mood_value, step_summary, to_millis, weekly_mood_trend,
)
from wellness.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

MOOD_ENTRIES = "moodEntries"
MEDITATION_SESSIONS = "meditationSessions"
JOURNAL_METRICS = "journalMetrics"
HEALTH_METRICS = "healthMetrics"
ANALYTICS_EVENTS = "analyticsEvents"
THERAPY_SESSIONS = "therapySessions"
JOURNAL_ENTRIES = "journalEntries"
CHAT_HISTORY = "chatHistory"
USER_PROFILE = "userProfile"

SEEDS: Dict[str, Callable[[datetime], List[Dict[str, Any]]]] = {
    MEDITATION_SESSIONS: seed_data.meditation_sessions,
    MOOD_ENTRIES: seed_data.mood_entries,
    JOURNAL_ENTRIES: seed_data.journal_entries,
    THERAPY_SESSIONS: seed_data.therapy_sessions,
}

COACH_GREETING = "Hello! I'm your AI Wellness Coach. How can I support your mental well-being today?"

_ALLOWED_TRANSITIONS = {
    TherapySessionStatus.UPCOMING.value: {
        TherapySessionStatus.COMPLETED.value,
        TherapySessionStatus.CANCELLED.value,
    },
}

M = TypeVar("M", bound=BaseModel)


class WellnessStorageError(Exception):
    pass


class StorageError(WellnessStorageError):
    """The key-value store failed or holds unreadable data."""


class SlotUnavailableError(WellnessStorageError):
    pass


class InvalidStatusTransitionError(WellnessStorageError):
    pass


class PastSlotError(WellnessStorageError):
    pass


# locks disappear once no writer holds them
_write_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(key: str) -> asyncio.Lock:
    lock = _write_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _write_locks[key] = lock
    return lock


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def _timestamp_of(item: Any) -> float:
    if isinstance(item, dict) and isinstance(item.get("timestamp"), (int, float)):
        return item["timestamp"]
    return 0


def _slot_key(item: Any):
    """Sort key for therapy sessions: by appointment date and time, unparseable last."""
    if isinstance(item, dict):
        try:
            return (0, datetime.strptime(f"{item['date']} {item['time']}", "%Y-%m-%d %I:%M %p"), "")
        except (KeyError, TypeError, ValueError):
            return (1, datetime.min, f"{item.get('date', '')} {item.get('time', '')}")
    return (1, datetime.min, "")


def _word_count(text: str) -> int:
    return len(text.split())


class DashboardStorage:
    def __init__(
        self,
        store: KeyValueStore,
        namespace: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._namespace = namespace
        self._clock = clock

    def _key(self, name: str) -> str:
        return f"{self._namespace}:{name}" if self._namespace else name

    # --- raw access ---
    async def _get_raw(self, name: str) -> Optional[str]:
        try:
            return await self._store.get(self._key(name))
        except Exception as e:
            raise StorageError(f"could not read {name}") from e

    async def _load(self, name: str) -> List[Any]:
        raw = await self._get_raw(name)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise StorageError(f"malformed JSON under {name}") from e
        if not isinstance(data, list):
            raise StorageError(f"{name} does not hold a JSON array")
        return data

    async def _save(self, name: str, items: Any) -> None:
        try:
            await self._store.set(self._key(name), json.dumps(items))
        except Exception as e:
            raise StorageError(f"could not write {name}") from e

    async def _load_or_empty(self, name: str) -> List[Any]:
        try:
            return await self._load(name)
        except StorageError:
            logger.exception("Error loading %s, treating as empty", name)
            return []

    @staticmethod
    def _parse(model: Type[M], items: Sequence[Any], name: str) -> List[M]:
        parsed = []
        for item in items:
            try:
                parsed.append(model.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed %s record: %r", name, item)
        return parsed

    async def _append(self, name: str, record: Dict[str, Any]) -> None:
        try:
            async with _lock_for(self._key(name)):
                items = await self._load(name)
                items.append(record)
                await self._save(name, items)
        except StorageError:
            logger.exception("Error saving %s record", name)

    def _now_ms(self) -> int:
        return to_millis(self._clock())

    # --- fire-and-forget appends ---
    async def record_mood(self, label: str) -> None:
        entry = MoodEntry(timestamp=self._now_ms(), mood=label, value=mood_value(label))
        await self._append(MOOD_ENTRIES, _dump(entry))

    async def record_meditation(self, duration: int, type: MeditationType | str) -> None:
        kind = type.value if isinstance(type, MeditationType) else type
        session = MeditationSession(timestamp=self._now_ms(), duration=duration, type=kind)
        await self._append(MEDITATION_SESSIONS, _dump(session))

    async def record_journal_metrics(
        self, word_count: int, categories: Sequence[str], timestamp: Optional[int] = None
    ) -> None:
        metrics = JournalMetrics(
            timestamp=self._now_ms() if timestamp is None else timestamp,
            word_count=word_count,
            categories=list(categories),
        )
        await self._append(JOURNAL_METRICS, _dump(metrics))

    async def record_health_sample(self, heart_rate: int, steps: int) -> None:
        sample = HealthMetrics(timestamp=self._now_ms(), heart_rate=heart_rate, steps=steps)
        await self._append(HEALTH_METRICS, _dump(sample))

    async def record_event(self, screen: str, action: str = "view") -> None:
        event = AnalyticsEvent(screen=screen, action=action, timestamp=self._now_ms())
        await self._append(ANALYTICS_EVENTS, _dump(event))

    # --- first-run demo data ---
    async def _seed_key(self, name: str, now: datetime) -> None:
        try:
            async with _lock_for(self._key(name)):
                if not await self._get_raw(name):
                    await self._save(name, SEEDS[name](now))
                    logger.info("Seeded sample data under %s", self._key(name))
        except StorageError:
            logger.exception("Error seeding %s", name)

    async def seed_if_empty(self, now: Optional[datetime] = None) -> None:
        """Write the demo dataset under every seeded key that holds no value yet."""
        now = now or self._clock()
        await asyncio.gather(*(self._seed_key(name, now) for name in SEEDS))

    # --- dashboard ---
    async def get_dashboard_snapshot(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        now = now or self._clock()
        try:
            # demo data is anchored at the real clock, never at a caller supplied time
            await self.seed_if_empty()

            raw_moods, raw_meditations, raw_journals, raw_health, raw_events = await asyncio.gather(
                self._load_or_empty(MOOD_ENTRIES),
                self._load_or_empty(MEDITATION_SESSIONS),
                self._load_or_empty(JOURNAL_METRICS),
                self._load_or_empty(HEALTH_METRICS),
                self._load_or_empty(ANALYTICS_EVENTS),
            )

            moods = filter_recent(self._parse(MoodEntry, raw_moods, MOOD_ENTRIES), now)
            meditations = filter_recent(self._parse(MeditationSession, raw_meditations, MEDITATION_SESSIONS), now)
            journals = filter_recent(self._parse(JournalMetrics, raw_journals, JOURNAL_METRICS), now)
            health = filter_recent(self._parse(HealthMetrics, raw_health, HEALTH_METRICS), now)
            analytics = filter_recent(self._parse(AnalyticsEvent, raw_events, ANALYTICS_EVENTS), now)

            return DashboardSnapshot(
                moods=moods,
                meditations=meditations,
                journals=journals,
                health=health,
                analytics=analytics,
                stats=compute_stats(moods, meditations, journals, health, now),
            )
        except Exception:
            # the dashboard always renders, worst case with zeros
            logger.exception("Error fetching dashboard data")
            return DashboardSnapshot()

    async def get_mood_trend(self, now: Optional[datetime] = None) -> MoodTrend:
        now = now or self._clock()
        snapshot = await self.get_dashboard_snapshot(now)
        return weekly_mood_trend(snapshot.moods, now)

    async def get_step_summary(
        self, now: Optional[datetime] = None, live_steps: Optional[int] = None
    ) -> StepSummary:
        now = now or self._clock()
        snapshot = await self.get_dashboard_snapshot(now)
        return step_summary(snapshot.health, now, live_steps=live_steps)

    # --- journal entries ---
    async def get_journal_entries(self) -> List[JournalEntry]:
        items = await self._load_or_empty(JOURNAL_ENTRIES)
        entries = self._parse(JournalEntry, items, JOURNAL_ENTRIES)
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    async def save_journal_entry(self, entry: JournalEntry) -> JournalEntry:
        """
        Insert the entry, or overwrite the stored one with the same id,
        then log its word count for the dashboard.
        """
        record = _dump(entry)
        async with _lock_for(self._key(JOURNAL_ENTRIES)):
            items = await self._load(JOURNAL_ENTRIES)
            replaced = False
            for i, item in enumerate(items):
                if isinstance(item, dict) and item.get("id") == entry.id:
                    items[i] = record
                    replaced = True
            if not replaced:
                items.insert(0, record)
            items.sort(key=_timestamp_of, reverse=True)
            await self._save(JOURNAL_ENTRIES, items)

        await self.record_journal_metrics(_word_count(entry.content), entry.categories, timestamp=entry.timestamp)
        return entry

    async def delete_journal_entry(self, entry_id: str) -> bool:
        async with _lock_for(self._key(JOURNAL_ENTRIES)):
            items = await self._load(JOURNAL_ENTRIES)
            kept = [i for i in items if not (isinstance(i, dict) and i.get("id") == entry_id)]
            if len(kept) == len(items):
                return False
            await self._save(JOURNAL_ENTRIES, kept)
        return True

    # --- therapy sessions ---
    async def get_therapy_sessions(self, include_cancelled: bool = True) -> List[TherapySession]:
        items = await self._load_or_empty(THERAPY_SESSIONS)
        sessions = self._parse(TherapySession, items, THERAPY_SESSIONS)
        if not include_cancelled:
            sessions = [s for s in sessions if s.status != TherapySessionStatus.CANCELLED]
        return sessions

    async def save_therapy_session(self, session: TherapySession) -> TherapySession:
        async with _lock_for(self._key(THERAPY_SESSIONS)):
            items = await self._load(THERAPY_SESSIONS)
            if session.status != TherapySessionStatus.CANCELLED:
                for item in items:
                    if (
                        isinstance(item, dict)
                        and item.get("date") == session.date
                        and item.get("time") == session.time
                        and item.get("status") != TherapySessionStatus.CANCELLED.value
                    ):
                        raise SlotUnavailableError("This time slot is already booked")
            items = [_dump(session)] + items
            items.sort(key=_slot_key)
            await self._save(THERAPY_SESSIONS, items)
        return session

    async def book_therapy_session(
        self, req: TherapySessionCreate, now: Optional[datetime] = None
    ) -> TherapySession:
        now = now or self._clock()
        starts_at = datetime.strptime(f"{req.date.isoformat()} {req.time}", "%Y-%m-%d %I:%M %p")
        if starts_at <= (now.astimezone().replace(tzinfo=None) if now.tzinfo else now):
            raise PastSlotError("Please select a future time slot")

        session = TherapySession(
            id=str(time.time_ns() // 1_000_000),
            therapist=req.therapist,
            specialty=req.specialty,
            date=req.date.isoformat(),
            time=req.time,
            type=req.type,
            status=TherapySessionStatus.UPCOMING,
            notes=req.notes,
        )
        return await self.save_therapy_session(session)

    async def update_therapy_session_status(
        self, session_id: str, status: TherapySessionStatus
    ) -> Optional[TherapySession]:
        new_status = TherapySessionStatus(status).value
        updated = None
        async with _lock_for(self._key(THERAPY_SESSIONS)):
            items = await self._load(THERAPY_SESSIONS)
            for item in items:
                if not (isinstance(item, dict) and item.get("id") == session_id):
                    continue
                current = item.get("status")
                if new_status not in _ALLOWED_TRANSITIONS.get(current, set()):
                    raise InvalidStatusTransitionError(
                        f"Cannot change session {session_id} from {current} to {new_status}"
                    )
                item["status"] = new_status
                updated = updated or item
            if updated is None:
                return None
            await self._save(THERAPY_SESSIONS, items)
        return TherapySession.model_validate(updated)

    async def delete_therapy_session(self, session_id: str) -> bool:
        async with _lock_for(self._key(THERAPY_SESSIONS)):
            items = await self._load(THERAPY_SESSIONS)
            kept = [i for i in items if not (isinstance(i, dict) and i.get("id") == session_id)]
            if len(kept) == len(items):
                return False
            await self._save(THERAPY_SESSIONS, kept)
        return True

    # --- coach chat history ---
    async def get_chat_history(self) -> List[ChatMessage]:
        items = await self._load_or_empty(CHAT_HISTORY)
        messages = self._parse(ChatMessage, items, CHAT_HISTORY)
        if not messages:
            greeting = ChatMessage(id="1", content=COACH_GREETING, sender="ai", timestamp=self._now_ms())
            await self.append_chat_messages(greeting)
            return [greeting]
        return messages

    async def append_chat_messages(self, *messages: ChatMessage) -> None:
        try:
            async with _lock_for(self._key(CHAT_HISTORY)):
                items = await self._load(CHAT_HISTORY)
                items.extend(_dump(m) for m in messages)
                await self._save(CHAT_HISTORY, items)
        except StorageError:
            logger.exception("Error saving chat history")

    # --- profile and preferences ---
    async def get_profile(self, default: Optional[UserProfile] = None) -> UserProfile:
        """
        Stored profile, or ``default`` (an empty profile when not given) if
        nothing has been saved yet or the stored value is unreadable.
        """
        fallback = default or UserProfile()
        raw = await self._get_raw(USER_PROFILE)
        if not raw:
            return fallback
        try:
            return UserProfile.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Unreadable %s, using defaults", USER_PROFILE)
            return fallback

    async def _update_profile(self, changes: Dict[str, Any], default: Optional[UserProfile]) -> UserProfile:
        async with _lock_for(self._key(USER_PROFILE)):
            profile = (await self.get_profile(default)).model_copy(update=changes)
            await self._save(USER_PROFILE, _dump(profile))
        return profile

    async def save_profile(self, update: ProfileUpdate, default: Optional[UserProfile] = None) -> UserProfile:
        # preferences are kept; blank optional fields clear the stored value
        return await self._update_profile(update.model_dump(), default)

    async def save_preferences(
        self, update: PreferencesUpdate, default: Optional[UserProfile] = None
    ) -> UserProfile:
        return await self._update_profile(update.model_dump(exclude_none=True), default)
