from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative model."""


class User(Base):
    """Registered account owning mood entries."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(500), nullable=False)
    last_name: Mapped[str] = mapped_column(String(500), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    moods: Mapped[list[MoodEntry]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class MoodEntry(Base):
    """A single mood check-in with stress, anxiety and energy levels."""

    __tablename__ = "mood"
    __table_args__ = (
        Index("ix_mood_user_id_recorded_at", "user_id", "recorded_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stress_level: Mapped[int] = mapped_column(Integer, nullable=False)
    anxiety_level: Mapped[int] = mapped_column(Integer, nullable=False)
    energy_level: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    user: Mapped[User] = relationship(back_populates="moods", passive_deletes=True)
    components: Mapped[list[MoodComponent]] = relationship(
        back_populates="mood",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MoodComponent.id",
    )


class MoodComponent(Base):
    """Emotion and intensity pair attached to a mood entry."""

    __tablename__ = "mood_components"
    __table_args__ = (
        UniqueConstraint("mood_id", "emotion", name="uq_mood_components_mood_emotion"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mood_id: Mapped[int] = mapped_column(
        ForeignKey("mood.id", ondelete="CASCADE"), nullable=False, index=True
    )
    emotion: Mapped[str] = mapped_column(String(20), nullable=False)
    intensity: Mapped[int] = mapped_column(Integer, nullable=False)

    mood: Mapped[MoodEntry] = relationship(back_populates="components", passive_deletes=True)


class SettingEntry(Base):
    """Key-value configuration stored in DB."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


__all__ = [
    "Base",
    "MoodComponent",
    "MoodEntry",
    "SettingEntry",
    "User",
]
