"""
Dashboard computations over already-loaded records.

Everything here is a pure function of its inputs and ``now``; the storage
layer loads and parses the records, this module only filters and counts.

Calendar days for streaks and the mood trend are local dates; step buckets
are UTC dates (``YYYY-MM-DD``).
"""
from __future__ import annotations
import math
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from wellness.schemas import (
    DashboardStats, HealthMetrics, JournalMetrics, MeditationSession, MoodEntry,
    MoodLabel, MoodTrend, StepSummary,
)

DAY_MS = 24 * 60 * 60 * 1000
WINDOW_DAYS = 7
STREAK_MAX_DAYS = 7
NEUTRAL_MOOD_VALUE = 3

MOOD_VALUES: Dict[str, int] = {
    MoodLabel.VERY_HAPPY.value: 5,
    MoodLabel.HAPPY.value: 4,
    MoodLabel.NEUTRAL.value: 3,
    MoodLabel.SAD.value: 2,
    MoodLabel.VERY_SAD.value: 1,
}

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

R = TypeVar("R")


def mood_value(label: str) -> int:
    """Unknown labels count as neutral."""
    return MOOD_VALUES.get(label, NEUTRAL_MOOD_VALUE)


def to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def local_date(timestamp_ms: int) -> date:
    return datetime.fromtimestamp(timestamp_ms / 1000).date()


def local_today(now: datetime) -> date:
    # naive datetimes are already local
    return now.astimezone().date() if now.tzinfo else now.date()


def utc_date_key(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date().isoformat()


def filter_recent(records: Iterable[R], now: datetime, days: int = WINDOW_DAYS) -> List[R]:
    cutoff = to_millis(now) - days * DAY_MS
    return [r for r in records if r.timestamp > cutoff]


def calculate_streak(records: Sequence, now: datetime, max_days: int = STREAK_MAX_DAYS) -> int:
    """
    Consecutive calendar days with at least one record, counted back from today.
    A day without records ends the streak, today included.
    """
    if not records:
        return 0
    active_days = {local_date(r.timestamp) for r in records}
    today = local_today(now)

    streak = 0
    for i in range(max_days):
        if today - timedelta(days=i) in active_days:
            streak += 1
        else:
            break
    return streak


def average_mood(moods: Sequence[MoodEntry]) -> float:
    return sum(m.value for m in moods) / (len(moods) or 1)


def compute_stats(
    moods: Sequence[MoodEntry],
    meditations: Sequence[MeditationSession],
    journals: Sequence[JournalMetrics],
    health: Sequence[HealthMetrics],
    now: datetime,
) -> DashboardStats:
    return DashboardStats(
        mood_streak=calculate_streak(moods, now),
        meditation_streak=calculate_streak(meditations, now),
        journal_streak=calculate_streak(journals, now),
        total_sessions=len(meditations),
        total_journals=len(journals),
        average_mood=average_mood(moods),
        total_steps=sum(h.steps for h in health),
    )


def trailing_days(today: date, days: int = WINDOW_DAYS) -> List[date]:
    """Distinct calendar dates, oldest first, ending today."""
    return [today - timedelta(days=i) for i in range(days - 1, -1, -1)]


def weekly_mood_trend(moods: Sequence[MoodEntry], now: datetime) -> MoodTrend:
    days = trailing_days(local_today(now))
    sums = {d: 0 for d in days}
    counts = {d: 0 for d in days}

    for entry in moods:
        d = local_date(entry.timestamp)
        if d in sums:
            sums[d] += entry.value
            counts[d] += 1

    return MoodTrend(
        labels=[WEEKDAY_LABELS[d.weekday()] for d in days],
        dates=days,
        data=[sums[d] / counts[d] if counts[d] else 0 for d in days],
    )


def daily_steps(health: Iterable[HealthMetrics]) -> Dict[str, int]:
    buckets: Dict[str, int] = {}
    for sample in health:
        key = utc_date_key(sample.timestamp)
        buckets[key] = buckets.get(key, 0) + sample.steps
    return buckets


def average_heart_rate(health: Sequence[HealthMetrics]) -> int:
    # every sample counts, step-only samples carry heart_rate 0
    if not health:
        return 0
    return math.floor(sum(h.heart_rate for h in health) / len(health) + 0.5)


def current_heart_rate(health: Sequence[HealthMetrics]) -> int:
    """Reading of the most recent sample, 0 when there is none."""
    if not health:
        return 0
    return max(health, key=lambda h: h.timestamp).heart_rate


def step_summary(
    health: Sequence[HealthMetrics],
    now: datetime,
    live_steps: Optional[int] = None,
) -> StepSummary:
    """
    Weekly step chart plus today's count.
    A live pedometer reading replaces today's stored bucket, it is never added to it.
    """
    buckets = daily_steps(health)
    days = trailing_days(now.astimezone(timezone.utc).date())
    today_key = days[-1].isoformat()

    if live_steps is not None:
        today_steps, source = live_steps, "live"
    else:
        today_steps, source = buckets.get(today_key, 0), "stored"

    return StepSummary(
        today_steps=today_steps,
        source=source,
        dates=days,
        weekly_steps=[buckets.get(d.isoformat(), 0) for d in days],
        average_heart_rate=average_heart_rate(health),
        current_heart_rate=current_heart_rate(health),
    )
