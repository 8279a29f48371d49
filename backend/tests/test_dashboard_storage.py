import asyncio
import json
from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from conftest import NOW, ms_ago
from wellness.schemas import (
    JournalEntry, MeditationType, PreferencesUpdate, ProfileUpdate, TherapySession,
    TherapySessionCreate, TherapySessionStatus, TherapySessionType, UserProfile,
)
from wellness.services.aggregation import MOOD_VALUES, calculate_streak
from wellness.services.dashboard_storage import (
    ANALYTICS_EVENTS, HEALTH_METRICS, JOURNAL_ENTRIES, JOURNAL_METRICS, MEDITATION_SESSIONS,
    MOOD_ENTRIES, THERAPY_SESSIONS, USER_PROFILE, DashboardStorage, InvalidStatusTransitionError,
    PastSlotError, SlotUnavailableError, StorageError,
)
from wellness.services.kv_store import InMemoryKeyValueStore


def stored(store, key):
    return json.loads(asyncio.run(store.get(key)))


class BrokenStore:
    async def get(self, key):
        raise ConnectionError("storage offline")

    async def set(self, key, value):
        raise ConnectionError("storage offline")


class SlowStore(InMemoryKeyValueStore):
    """Yields to the loop inside every call, like a real I/O backend."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value):
        await asyncio.sleep(0)
        await super().set(key, value)


# --- appends ---

def test_record_mood_maps_labels(storage, memory_store):
    async def run():
        for label in MOOD_VALUES:
            await storage.record_mood(label)
        await storage.record_mood("Grateful")
    asyncio.run(run())

    entries = stored(memory_store, MOOD_ENTRIES)
    assert [e["value"] for e in entries] == [5, 4, 3, 2, 1, 3]
    assert entries[-1] == {"timestamp": ms_ago(0), "mood": "Grateful", "value": 3}


def test_record_helpers_write_camel_case_records(storage, memory_store):
    async def run():
        await storage.record_meditation(300, MeditationType.BODY_SCAN)
        await storage.record_journal_metrics(42, ["Gratitude"])
        await storage.record_health_sample(72, 1500)
        await storage.record_event("Dashboard")
    asyncio.run(run())

    assert stored(memory_store, MEDITATION_SESSIONS) == [{"timestamp": ms_ago(0), "duration": 300, "type": "Body Scan"}]
    assert stored(memory_store, JOURNAL_METRICS) == [{"timestamp": ms_ago(0), "wordCount": 42, "categories": ["Gratitude"]}]
    assert stored(memory_store, HEALTH_METRICS) == [{"timestamp": ms_ago(0), "heartRate": 72, "steps": 1500}]
    assert stored(memory_store, ANALYTICS_EVENTS) == [{"screen": "Dashboard", "action": "view", "timestamp": ms_ago(0)}]


def test_record_appends_to_existing_collection(storage, memory_store):
    existing = [{"timestamp": ms_ago(3), "heartRate": 60, "steps": 10}]
    asyncio.run(memory_store.set(HEALTH_METRICS, json.dumps(existing)))

    asyncio.run(storage.record_health_sample(0, 20))

    assert [r["steps"] for r in stored(memory_store, HEALTH_METRICS)] == [10, 20]


def test_record_swallows_storage_failure():
    storage = DashboardStorage(BrokenStore(), clock=lambda: NOW)
    # no exception reaches the caller
    asyncio.run(storage.record_mood("Happy"))
    asyncio.run(storage.record_event("Dashboard", "view"))


def test_concurrent_appends_are_not_lost():
    store = SlowStore()
    storage = DashboardStorage(store, clock=lambda: NOW)

    async def run():
        await asyncio.gather(*(storage.record_health_sample(0, i) for i in range(25)))
    asyncio.run(run())

    assert sorted(r["steps"] for r in stored(store, HEALTH_METRICS)) == list(range(25))


def test_namespaces_keep_users_apart(memory_store):
    alice = DashboardStorage(memory_store, namespace="user:1", clock=lambda: NOW)
    bob = DashboardStorage(memory_store, namespace="user:2", clock=lambda: NOW)

    asyncio.run(alice.record_mood("Happy"))

    assert memory_store.keys() == ["user:1:moodEntries"]
    assert asyncio.run(bob.get_dashboard_snapshot(NOW)).stats.total_sessions == 10
    assert len(asyncio.run(bob.get_dashboard_snapshot(NOW)).moods) == 7
    assert len(asyncio.run(alice.get_dashboard_snapshot(NOW)).moods) == 1


# --- snapshot ---

def test_fresh_store_is_seeded(storage, memory_store):
    snapshot = asyncio.run(storage.get_dashboard_snapshot(NOW))

    assert snapshot.stats.total_sessions == 10
    assert len(stored(memory_store, MEDITATION_SESSIONS)) == 10
    assert len(stored(memory_store, MOOD_ENTRIES)) == 13
    assert len(stored(memory_store, JOURNAL_ENTRIES)) == 2
    assert len(stored(memory_store, THERAPY_SESSIONS)) == 5

    # seeded moods sit at 0..9, 14, 21 and 28 days ago; 0..6 are in the window
    assert len(snapshot.moods) == 7
    assert snapshot.stats.mood_streak == calculate_streak(snapshot.moods, NOW) == 7
    assert snapshot.stats.meditation_streak == 7
    assert snapshot.stats.average_mood == pytest.approx((4 + 5 + 3 + 4 + 5 + 4 + 3) / 7)

    # journal metrics and health are never seeded
    assert snapshot.journals == []
    assert snapshot.stats.total_journals == 0
    assert snapshot.stats.total_steps == 0


def test_snapshot_is_idempotent(storage):
    first = asyncio.run(storage.get_dashboard_snapshot(NOW))
    second = asyncio.run(storage.get_dashboard_snapshot(NOW))
    assert first == second


def test_seed_skips_key_with_existing_record(storage, memory_store):
    asyncio.run(storage.record_mood("Sad"))

    snapshot = asyncio.run(storage.get_dashboard_snapshot(NOW))

    assert len(stored(memory_store, MOOD_ENTRIES)) == 1
    assert [m.value for m in snapshot.moods] == [2]
    # other keys are still seeded independently
    assert snapshot.stats.total_sessions == 10


def test_seed_skips_empty_array(storage, memory_store):
    asyncio.run(memory_store.set(THERAPY_SESSIONS, "[]"))
    asyncio.run(storage.get_dashboard_snapshot(NOW))
    assert stored(memory_store, THERAPY_SESSIONS) == []


def test_seed_ignores_requested_reference_time(storage, memory_store):
    stale = NOW - timedelta(days=30)
    asyncio.run(storage.get_dashboard_snapshot(stale))

    # seeded around the clock, so the current week is fully populated
    assert stored(memory_store, MEDITATION_SESSIONS)[0]["timestamp"] == ms_ago(0)
    assert stored(memory_store, MOOD_ENTRIES)[0]["timestamp"] == ms_ago(0)
    assert asyncio.run(storage.get_dashboard_snapshot(NOW)).stats.total_sessions == 10


def test_snapshot_reports_new_meditation():
    storage = DashboardStorage(InMemoryKeyValueStore())
    baseline = asyncio.run(storage.get_dashboard_snapshot())

    asyncio.run(storage.record_meditation(300, "Body Scan"))
    after = asyncio.run(storage.get_dashboard_snapshot())

    assert after.stats.total_sessions == baseline.stats.total_sessions + 1
    added = [m for m in after.meditations if m.duration == 300]
    assert len(added) == 1
    assert added[0].type == "Body Scan"


def test_snapshot_treats_malformed_collection_as_empty(storage, memory_store):
    asyncio.run(memory_store.set(HEALTH_METRICS, "{not json"))
    asyncio.run(memory_store.set(ANALYTICS_EVENTS, json.dumps({"screen": "Dashboard"})))
    asyncio.run(memory_store.set(JOURNAL_METRICS, json.dumps([
        {"timestamp": ms_ago(0), "wordCount": 12, "categories": []},
        {"wordCount": "lots"},
        "garbage",
    ])))

    snapshot = asyncio.run(storage.get_dashboard_snapshot(NOW))

    assert snapshot.health == []
    assert snapshot.analytics == []
    assert len(snapshot.journals) == 1
    assert snapshot.stats.journal_streak == 1
    assert snapshot.stats.total_sessions == 10


def test_snapshot_with_unavailable_store_is_all_zero():
    storage = DashboardStorage(BrokenStore(), clock=lambda: NOW)
    snapshot = asyncio.run(storage.get_dashboard_snapshot(NOW))

    assert snapshot.moods == []
    assert snapshot.stats.total_sessions == 0
    assert snapshot.stats.average_mood == 0
    assert snapshot.stats.mood_streak == 0


def test_mood_trend_and_steps_use_window(storage, memory_store):
    asyncio.run(memory_store.set(MOOD_ENTRIES, json.dumps([
        {"timestamp": ms_ago(1, hours=1), "mood": "Happy", "value": 4},
        {"timestamp": ms_ago(1, hours=3), "mood": "Sad", "value": 2},
    ])))
    asyncio.run(memory_store.set(HEALTH_METRICS, json.dumps([
        {"timestamp": ms_ago(d), "heartRate": 0, "steps": s}
        for d, s in [(0, 100), (1, 250), (2, 0), (3, 300), (9, 5000)]
    ])))

    trend = asyncio.run(storage.get_mood_trend(NOW))
    steps = asyncio.run(storage.get_step_summary(NOW, live_steps=None))
    snapshot = asyncio.run(storage.get_dashboard_snapshot(NOW))

    assert trend.data[-2] == 3
    assert snapshot.stats.total_steps == 650
    assert sum(steps.weekly_steps) == 650


# --- journal ---

def journal_entry(entry_id, days_ago=0, content="one two three", categories=("Work",)):
    moment = NOW - timedelta(days=days_ago)
    return JournalEntry(
        id=entry_id, title=f"Entry {entry_id}", content=content,
        date=moment.date().isoformat(), time="09:00", timestamp=ms_ago(days_ago),
        categories=list(categories),
    )


def test_save_journal_entry_inserts_newest_first_and_logs_metrics(storage, memory_store):
    async def run():
        await storage.save_journal_entry(journal_entry("a", days_ago=2))
        await storage.save_journal_entry(journal_entry("b", days_ago=0, content="  hello   quiet world "))
    asyncio.run(run())

    entries = asyncio.run(storage.get_journal_entries())
    assert [e.id for e in entries] == ["b", "a"]

    metrics = stored(memory_store, JOURNAL_METRICS)
    assert [m["wordCount"] for m in metrics] == [3, 3]
    assert metrics[1]["timestamp"] == ms_ago(0)


def test_save_journal_entry_overwrites_by_id(storage):
    async def run():
        await storage.save_journal_entry(journal_entry("a"))
        await storage.save_journal_entry(journal_entry("a", content="rewritten"))
        return await storage.get_journal_entries()
    entries = asyncio.run(run())

    assert len(entries) == 1
    assert entries[0].content == "rewritten"


def test_delete_journal_entry(storage):
    asyncio.run(storage.save_journal_entry(journal_entry("a")))
    assert asyncio.run(storage.delete_journal_entry("a")) is True
    assert asyncio.run(storage.delete_journal_entry("a")) is False
    assert asyncio.run(storage.get_journal_entries()) == []


def test_save_journal_entry_raises_on_storage_failure():
    storage = DashboardStorage(BrokenStore(), clock=lambda: NOW)
    with pytest.raises(StorageError):
        asyncio.run(storage.save_journal_entry(journal_entry("a")))


# --- therapy sessions ---

def therapy(sid, day, time_="10:00 AM", status=TherapySessionStatus.UPCOMING):
    return TherapySession(
        id=sid, therapist="Dr. Sarah Johnson", date=day, time=time_,
        type=TherapySessionType.VIDEO_CALL, status=status,
    )


def test_therapy_sessions_sorted_by_appointment(storage):
    async def run():
        await storage.save_therapy_session(therapy("1", "2026-10-22", "2:00 PM"))
        await storage.save_therapy_session(therapy("2", "2026-10-22", "9:00 AM"))
        await storage.save_therapy_session(therapy("3", "2026-10-20", "4:00 PM"))
        return await storage.get_therapy_sessions()
    sessions = asyncio.run(run())
    assert [s.id for s in sessions] == ["3", "2", "1"]


def test_therapy_slot_taken_unless_cancelled(storage):
    asyncio.run(storage.save_therapy_session(therapy("1", "2026-10-22")))
    with pytest.raises(SlotUnavailableError):
        asyncio.run(storage.save_therapy_session(therapy("2", "2026-10-22")))

    asyncio.run(storage.update_therapy_session_status("1", TherapySessionStatus.CANCELLED))
    asyncio.run(storage.save_therapy_session(therapy("2", "2026-10-22")))

    visible = asyncio.run(storage.get_therapy_sessions(include_cancelled=False))
    assert [s.id for s in visible] == ["2"]
    assert len(asyncio.run(storage.get_therapy_sessions())) == 2


def test_book_therapy_session_rejects_past_slot(storage):
    req = TherapySessionCreate(therapist="Dr. Michael Chen", date=date(2026, 10, 19), time="9:00 AM")
    with pytest.raises(PastSlotError):
        asyncio.run(storage.book_therapy_session(req, now=NOW))


def test_book_therapy_session_creates_upcoming(storage):
    req = TherapySessionCreate(
        therapist="Dr. Michael Chen", date=date(2026, 10, 21), time="2:00 PM",
        type=TherapySessionType.AUDIO_CALL, notes="Monthly check-in",
    )
    session = asyncio.run(storage.book_therapy_session(req, now=NOW))

    assert session.status == TherapySessionStatus.UPCOMING
    assert session.date == "2026-10-21"
    assert asyncio.run(storage.get_therapy_sessions()) == [session]


def test_therapy_status_transitions(storage):
    asyncio.run(storage.save_therapy_session(therapy("1", "2026-10-22")))

    updated = asyncio.run(storage.update_therapy_session_status("1", TherapySessionStatus.COMPLETED))
    assert updated.status == TherapySessionStatus.COMPLETED

    with pytest.raises(InvalidStatusTransitionError):
        asyncio.run(storage.update_therapy_session_status("1", TherapySessionStatus.CANCELLED))
    with pytest.raises(InvalidStatusTransitionError):
        asyncio.run(storage.update_therapy_session_status("1", TherapySessionStatus.UPCOMING))

    assert asyncio.run(storage.update_therapy_session_status("missing", TherapySessionStatus.COMPLETED)) is None


def test_delete_therapy_session(storage):
    asyncio.run(storage.save_therapy_session(therapy("1", "2026-10-22")))
    assert asyncio.run(storage.delete_therapy_session("1")) is True
    assert asyncio.run(storage.delete_therapy_session("1")) is False


def test_therapy_reads_default_to_empty_on_failure():
    storage = DashboardStorage(BrokenStore(), clock=lambda: NOW)
    assert asyncio.run(storage.get_therapy_sessions()) == []


# --- chat history ---

def test_chat_history_starts_with_greeting(storage):
    history = asyncio.run(storage.get_chat_history())
    assert len(history) == 1
    assert history[0].sender == "ai"
    # greeting is stored, not regenerated
    assert asyncio.run(storage.get_chat_history()) == history


def test_profile_defaults_until_saved(storage):
    assert asyncio.run(storage.get_profile()) == UserProfile()
    account = UserProfile(name="Mina", email="mina@mindful-app.com")
    assert asyncio.run(storage.get_profile(account)) == account


def test_profile_save_keeps_preferences(storage, memory_store):
    account = UserProfile(name="Mina", email="mina@mindful-app.com")
    asyncio.run(storage.save_preferences(PreferencesUpdate(notifications=True), account))

    update = ProfileUpdate(name="  Mina Park ", email="mina@mindful-app.com", age="29", height=" ", weight="54")
    profile = asyncio.run(storage.save_profile(update, account))

    assert profile.name == "Mina Park"
    assert profile.height is None
    assert profile.notifications is True
    assert stored(memory_store, USER_PROFILE)["age"] == "29"
    assert asyncio.run(storage.get_profile()) == profile


def test_preferences_update_only_given_fields(storage):
    asyncio.run(storage.save_preferences(PreferencesUpdate(private_account=True, avatar_uri="file:///a.jpg")))
    profile = asyncio.run(storage.save_preferences(PreferencesUpdate(notifications=True)))

    assert profile.private_account is True
    assert profile.notifications is True
    assert profile.avatar_uri == "file:///a.jpg"


@pytest.mark.parametrize("name, email", [("", "a@b.com"), ("   ", "a@b.com"), ("Mina", " ")])
def test_profile_rejects_blank_name_or_email(name, email):
    with pytest.raises(ValidationError):
        ProfileUpdate(name=name, email=email)


def test_unreadable_profile_falls_back_to_default(storage, memory_store):
    asyncio.run(memory_store.set(USER_PROFILE, "{not json"))
    account = UserProfile(name="Mina", email="mina@mindful-app.com")
    assert asyncio.run(storage.get_profile(account)) == account


def test_profile_storage_failure_raises():
    storage = DashboardStorage(BrokenStore(), clock=lambda: NOW)
    with pytest.raises(StorageError):
        asyncio.run(storage.get_profile())
