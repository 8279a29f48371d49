"""
Demo records written on first access so a new account never sees an empty dashboard.

All timestamps are relative to ``now``; the same ``now`` always yields the same records.
"""
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Any, Dict, List

from wellness.schemas import MeditationType, TherapySessionStatus, TherapySessionType
from wellness.services.aggregation import DAY_MS, mood_value, to_millis

HOUR_MS = 60 * 60 * 1000

# (hours ago, seconds, type); every session falls inside the 7-day window
_MEDITATIONS = [
    (0, 1028, MeditationType.MINDFUL_BREATHING),
    (3, 876, MeditationType.BODY_SCAN),
    (24, 1028, MeditationType.MINDFUL_BREATHING),
    (48, 876, MeditationType.BODY_SCAN),
    (51, 1028, MeditationType.MINDFUL_BREATHING),
    (72, 876, MeditationType.BODY_SCAN),
    (96, 1028, MeditationType.MINDFUL_BREATHING),
    (120, 876, MeditationType.BODY_SCAN),
    (123, 1028, MeditationType.MINDFUL_BREATHING),
    (144, 876, MeditationType.BODY_SCAN),
]

# (days ago, label)
_MOODS = [
    (0, "Happy"),
    (1, "Very Happy"),
    (2, "Neutral"),
    (3, "Happy"),
    (4, "Very Happy"),
    (5, "Happy"),
    (6, "Neutral"),
    (7, "Sad"),
    (8, "Happy"),
    (9, "Very Happy"),
    (14, "Happy"),
    (21, "Neutral"),
    (28, "Happy"),
]

# (id, therapist, days from now, time, type, status, notes)
_THERAPY = [
    ("1", "Dr. Sarah Johnson", 2, "10:00 AM", TherapySessionType.VIDEO_CALL,
     TherapySessionStatus.UPCOMING, "Follow-up on meditation progress"),
    ("2", "Dr. Michael Chen", 5, "2:00 PM", TherapySessionType.VIDEO_CALL,
     TherapySessionStatus.UPCOMING, "Monthly check-in"),
    ("3", "Dr. Sarah Johnson", -7, "11:00 AM", TherapySessionType.VIDEO_CALL,
     TherapySessionStatus.COMPLETED, "Discussed stress management techniques"),
    ("4", "Dr. Michael Chen", -14, "3:00 PM", TherapySessionType.AUDIO_CALL,
     TherapySessionStatus.COMPLETED, "Worked on anxiety coping strategies"),
    ("5", "Dr. Sarah Johnson", -21, "10:00 AM", TherapySessionType.VIDEO_CALL,
     TherapySessionStatus.COMPLETED, "Initial session - set treatment goals"),
]


def meditation_sessions(now: datetime) -> List[Dict[str, Any]]:
    base = to_millis(now)
    return [
        {"timestamp": base - hours * HOUR_MS, "duration": duration, "type": kind.value}
        for hours, duration, kind in _MEDITATIONS
    ]


def mood_entries(now: datetime) -> List[Dict[str, Any]]:
    base = to_millis(now)
    return [
        {"timestamp": base - days * DAY_MS, "mood": label, "value": mood_value(label)}
        for days, label in _MOODS
    ]


def journal_entries(now: datetime) -> List[Dict[str, Any]]:
    base = to_millis(now)
    two_days_ago = now - timedelta(days=2)
    return [
        {
            "id": "1",
            "title": "Finding Joy in Small Things",
            "content": "Today was a beautiful day. The sun was shining and I took a moment "
                       "to appreciate the simple pleasures in life.",
            "date": now.date().isoformat(),
            "time": "10:30",
            "timestamp": base,
            "mood": {"emoji": "\U0001F60A", "label": "Happy"},
            "categories": ["Gratitude", "Reflection"],
        },
        {
            "id": "2",
            "title": "Overcoming Challenges",
            "content": "Had a difficult situation at work but managed to handle it well. "
                       "Proud of how I maintained my composure.",
            "date": two_days_ago.date().isoformat(),
            "time": "15:45",
            "timestamp": base - 2 * DAY_MS,
            "mood": {"emoji": "\U0001F60C", "label": "Calm"},
            "categories": ["Challenges", "Achievement"],
        },
    ]


def therapy_sessions(now: datetime) -> List[Dict[str, Any]]:
    sessions = []
    for sid, therapist, days, time, kind, status, notes in _THERAPY:
        sessions.append({
            "id": sid,
            "therapist": therapist,
            "date": (now + timedelta(days=days)).date().isoformat(),
            "time": time,
            "type": kind.value,
            "status": status.value,
            "notes": notes,
        })
    return sessions
