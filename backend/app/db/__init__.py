"""Database utilities for Orbit."""

from .models import (
    Base,
    MoodComponent,
    MoodEntry,
    SettingEntry,
    User,
)

__all__ = [
    "Base",
    "MoodComponent",
    "MoodEntry",
    "SettingEntry",
    "User",
]
