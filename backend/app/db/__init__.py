"""Database models for MoodBuddy."""

from .models import (
    Base,
    ChatMessage,
    MoodEntry,
    SettingEntry,
    User,
)

__all__ = [
    "Base",
    "ChatMessage",
    "MoodEntry",
    "SettingEntry",
    "User",
]
