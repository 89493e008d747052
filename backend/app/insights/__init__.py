"""Mood statistics and achievements."""

from .badges import Badge, evaluate_badges
from .dashboard import (
    MOOD_VALENCE,
    NEUTRAL_MOOD,
    DashboardStats,
    UnknownMoodCategory,
    compute_dashboard_stats,
    is_known_mood,
    mood_valence,
)

__all__ = [
    "MOOD_VALENCE",
    "NEUTRAL_MOOD",
    "Badge",
    "DashboardStats",
    "UnknownMoodCategory",
    "compute_dashboard_stats",
    "evaluate_badges",
    "is_known_mood",
    "mood_valence",
]
