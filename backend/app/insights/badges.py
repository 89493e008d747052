from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .dashboard import DashboardStats


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    unlocked: bool


_BADGE_RULES: tuple[tuple[str, str, str, Callable[[DashboardStats], bool]], ...] = (
    (
        "first-steps",
        "First Steps",
        "Log your first mood entry",
        lambda stats: stats.total_entries >= 1,
    ),
    (
        "week-warrior",
        "Week Warrior",
        "Log moods for 7 consecutive days",
        lambda stats: stats.current_streak >= 7,
    ),
    (
        "month-master",
        "Month Master",
        "Log moods for 30 consecutive days",
        lambda stats: stats.current_streak >= 30,
    ),
    (
        "century-club",
        "Century Club",
        "Log 100 mood entries",
        lambda stats: stats.total_entries >= 100,
    ),
)


def evaluate_badges(stats: DashboardStats) -> list[Badge]:
    """Return every achievement badge with its unlock state for ``stats``."""

    return [
        Badge(id=badge_id, name=name, description=description, unlocked=rule(stats))
        for badge_id, name, description, rule in _BADGE_RULES
    ]
