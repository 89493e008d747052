from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

# saddest to happiest
MOOD_VALENCE: dict[str, int] = {
    "😢": 1,
    "😟": 2,
    "😐": 3,
    "😊": 4,
    "😁": 5,
}
NEUTRAL_MOOD = "😐"
NEUTRAL_VALENCE = MOOD_VALENCE[NEUTRAL_MOOD]
TREND_POLICIES = frozenset({"last", "first"})


class UnknownMoodCategory(ValueError):
    """Raised in strict mode when an entry carries a symbol outside the mood set."""

    def __init__(self, mood: str) -> None:
        super().__init__(f"unknown mood category: {mood!r}")
        self.mood = mood


class MoodRecord(Protocol):
    mood: str
    date: date


@dataclass
class DashboardStats:
    total_entries: int = 0
    mood_counts: dict[str, int] = field(default_factory=dict)
    mood_trends: dict[str, str] = field(default_factory=dict)
    current_streak: int = 0
    average_mood: str = "0.0"


def is_known_mood(mood: str) -> bool:
    return mood in MOOD_VALENCE


def mood_valence(mood: str, *, strict: bool = False) -> int:
    """Map a mood symbol to 1..5, unknown symbols count as neutral unless strict."""

    value = MOOD_VALENCE.get(mood)
    if value is None:
        if strict:
            raise UnknownMoodCategory(mood)
        return NEUTRAL_VALENCE
    return value


def compute_dashboard_stats(
    entries: Iterable[MoodRecord],
    *,
    strict: bool = False,
    trend_policy: str = "last",
) -> DashboardStats:
    """Aggregate one user's mood entries, given in ascending date order.

    ``current_streak`` is a running counter rather than a historical maximum:
    a one-day gap extends it, a longer gap restarts it at 1 and entries on the
    same day leave it untouched. Its final value is what gets reported.

    ``trend_policy`` decides which entry represents a day that has several:
    ``"last"`` lets later entries overwrite earlier ones, ``"first"`` keeps the
    earliest.
    """

    if trend_policy not in TREND_POLICIES:
        raise ValueError(f"unsupported trend policy: {trend_policy!r}")

    counts: dict[str, int] = {}
    trends: dict[date, str] = {}
    streak = 0
    total = 0
    previous: date | None = None

    for entry in entries:
        if strict and not is_known_mood(entry.mood):
            raise UnknownMoodCategory(entry.mood)
        total += 1
        counts[entry.mood] = counts.get(entry.mood, 0) + 1

        if trend_policy == "last" or entry.date not in trends:
            trends[entry.date] = entry.mood

        if previous is None:
            streak = 1
        else:
            gap = (entry.date - previous).days
            if gap == 1:
                streak += 1
            elif gap > 1:
                streak = 1
        previous = entry.date

    weighted = sum(mood_valence(mood) * count for mood, count in counts.items())
    average = weighted / total if total else 0.0

    return DashboardStats(
        total_entries=total,
        mood_counts=counts,
        mood_trends={day.isoformat(): trends[day] for day in sorted(trends)},
        current_streak=streak,
        average_mood=f"{average:.1f}",
    )


__all__ = [
    "MOOD_VALENCE",
    "NEUTRAL_MOOD",
    "DashboardStats",
    "MoodRecord",
    "UnknownMoodCategory",
    "compute_dashboard_stats",
    "is_known_mood",
    "mood_valence",
]
