from __future__ import annotations
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from datetime import date, datetime
from enum import Enum

# stored JSON and the mobile client both use camelCase field names
class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

# --- enums ---
class MoodLabel(str, Enum):
    VERY_HAPPY = "Very Happy"
    HAPPY = "Happy"
    NEUTRAL = "Neutral"
    SAD = "Sad"
    VERY_SAD = "Very Sad"

class MeditationType(str, Enum):
    MINDFUL_BREATHING = "Mindful Breathing"
    BODY_SCAN = "Body Scan"

class TherapySessionType(str, Enum):
    VIDEO_CALL = "Video Call"
    AUDIO_CALL = "Audio Call"
    CHAT = "Chat"

class TherapySessionStatus(str, Enum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

# --- stored records (one JSON array per storage key) ---
class MoodEntry(CamelModel):
    timestamp: int
    mood: str
    value: int = Field(..., ge=1, le=5)

class MeditationSession(CamelModel):
    timestamp: int
    duration: int = Field(..., ge=0)
    type: str

class JournalMetrics(CamelModel):
    timestamp: int
    word_count: int = 0
    categories: List[str] = []

class HealthMetrics(CamelModel):
    timestamp: int
    heart_rate: int = 0
    steps: int = 0

class AnalyticsEvent(CamelModel):
    screen: str
    action: str = "view"
    timestamp: int

class TherapySession(CamelModel):
    id: str
    therapist: str
    specialty: Optional[str] = None
    date: str  # YYYY-MM-DD
    time: str  # "10:00 AM"
    type: TherapySessionType
    status: TherapySessionStatus = TherapySessionStatus.UPCOMING
    notes: Optional[str] = None

class JournalMood(CamelModel):
    emoji: str
    label: str

class JournalEntry(CamelModel):
    id: str
    title: str
    content: str
    date: str
    time: str
    timestamp: int
    mood: Optional[JournalMood] = None
    categories: List[str] = []

class ChatMessage(CamelModel):
    id: str
    content: str
    sender: Literal["user", "ai"]
    timestamp: int

class UserProfile(CamelModel):
    """Stored as a single JSON object, not an array."""
    name: str = ""
    email: str = ""
    age: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    notifications: bool = False
    private_account: bool = False
    avatar_uri: Optional[str] = None

# --- dashboard view models ---
class DashboardStats(CamelModel):
    mood_streak: int = 0
    meditation_streak: int = 0
    journal_streak: int = 0
    total_sessions: int = 0
    total_journals: int = 0
    average_mood: float = 0
    total_steps: int = 0

class DashboardSnapshot(CamelModel):
    moods: List[MoodEntry] = []
    meditations: List[MeditationSession] = []
    journals: List[JournalMetrics] = []
    health: List[HealthMetrics] = []
    analytics: List[AnalyticsEvent] = []
    stats: DashboardStats = DashboardStats()

class MoodTrend(CamelModel):
    """Trailing seven days, oldest first."""
    labels: List[str]
    dates: List[date]
    data: List[float]

class StepSummary(CamelModel):
    today_steps: int
    source: Literal["live", "stored"]
    dates: List[date]
    weekly_steps: List[int]
    average_heart_rate: int
    current_heart_rate: int = 0

# --- activity tracking requests ---
class MoodRecordReq(CamelModel):
    mood: str = Field(..., min_length=1)

class MeditationRecordReq(CamelModel):
    duration: int = Field(..., ge=0, description="seconds")
    type: MeditationType

class JournalMetricsRecordReq(CamelModel):
    word_count: int = Field(..., ge=0)
    categories: List[str] = []

class HealthSampleReq(CamelModel):
    heart_rate: int = Field(0, ge=0)
    steps: int = Field(0, ge=0)

class EventRecordReq(CamelModel):
    screen: str = Field(..., min_length=1)
    action: str = "view"

# --- journal ---
class JournalEntryIn(CamelModel):
    title: str = Field(..., min_length=1, description="Please enter a title for your journal entry")
    content: str = Field(..., min_length=1)
    mood: Optional[JournalMood] = None
    categories: List[str] = []

# --- therapy sessions ---
class TherapySessionCreate(CamelModel):
    therapist: str = Field(..., min_length=1)
    specialty: Optional[str] = None
    date: date
    time: str = Field(..., pattern=r"^(0?[1-9]|1[0-2]):[0-5]\d (AM|PM)$")
    type: TherapySessionType = TherapySessionType.VIDEO_CALL
    notes: Optional[str] = None

class TherapyStatusUpdate(CamelModel):
    status: TherapySessionStatus

# --- remote mood logs ---
class MoodLogCreate(CamelModel):
    mood: str = Field(..., min_length=1, max_length=16)
    mood_label: str = Field(..., min_length=1, max_length=64)
    intensity: Optional[int] = Field(None, ge=1, le=10)
    symptoms: List[str] = []
    reflection_text: Optional[str] = None
    suggestion_text: Optional[str] = None
    quote_text: Optional[str] = None

class MoodLogOut(MoodLogCreate):
    id: int
    symptoms: Optional[List[str]] = None
    user_id: int
    created_at: Optional[datetime] = None

# --- coach ---
class CoachChatReq(CamelModel):
    message: str = Field(..., min_length=1)

class CoachChatResp(CamelModel):
    reply: ChatMessage
    history: List[ChatMessage] = []

class JournalReflectionReq(CamelModel):
    content: str = Field(..., min_length=1)

class MoodSuggestionReq(CamelModel):
    mood_label: str = Field(..., min_length=1)

class CoachTextResp(CamelModel):
    text: str

# --- profile ---
class ProfileUpdate(CamelModel):
    name: str
    email: str
    age: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None

    @field_validator("name", "email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name and email cannot be blank")
        return v

    @field_validator("age", "height", "weight")
    @classmethod
    def blank_as_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

class PreferencesUpdate(CamelModel):
    notifications: Optional[bool] = None
    private_account: Optional[bool] = None
    avatar_uri: Optional[str] = None

# --- auth ---
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = None

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserPublic(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str] = None

    class Config:
        from_attributes = True
