from __future__ import annotations
from typing import Optional

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    BigInteger, String, Text, Integer, DateTime, CheckConstraint,
    ForeignKey, Index, JSON
)
from sqlalchemy.sql import func

from wellness.db import Base
from datetime import datetime

# sqlite only autoincrements INTEGER primary keys
PK = BigInteger().with_variant(Integer, "sqlite")

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(PK, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[Optional["datetime"]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    mood_logs: Mapped[list["MoodLog"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

class KeyValueEntry(Base):
    """
    Backing table for the per-user key-value store.
    One row per storage key, value is a serialized JSON array.
    """
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[Optional["datetime"]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

class MoodLog(Base):
    """
    Remote mood log written by the mood picker.
    Kept apart from the moodEntries history of the key-value store.
    """
    __tablename__ = "mood_logs"
    __table_args__ = (
        CheckConstraint(
            "intensity is null or (intensity >= 1 and intensity <= 10)",
            name="ck_mood_logs_intensity",
        ),
        Index("idx_mood_logs_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(PK, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    mood: Mapped[str] = mapped_column(String(16), nullable=False)  # emoji
    mood_label: Mapped[str] = mapped_column(String(64), nullable=False)
    intensity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    symptoms: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    reflection_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    suggestion_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quote_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[Optional["datetime"]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="mood_logs")
