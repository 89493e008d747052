from __future__ import annotations

import datetime as dt
from datetime import datetime

from pydantic import BaseModel, Field

from .base import CamelModel


class MoodCreate(CamelModel):
    user_id: str = Field(..., min_length=1)
    mood: str = Field(..., min_length=1, max_length=16)
    note: str | None = Field(default=None, max_length=2000)


class MoodEntryModel(BaseModel):
    id: str
    user_id: str
    mood: str
    note: str
    date: dt.date
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class MoodCreateResponse(BaseModel):
    message: str = "Mood logged successfully"
    mood: MoodEntryModel


class DashboardResponse(CamelModel):
    total_entries: int
    mood_counts: dict[str, int]
    mood_trends: dict[str, str]
    current_streak: int
    average_mood: str


class BadgeModel(BaseModel):
    id: str
    name: str
    description: str
    unlocked: bool

    model_config = {
        "from_attributes": True,
    }


class BadgeListResponse(BaseModel):
    badges: list[BadgeModel]
