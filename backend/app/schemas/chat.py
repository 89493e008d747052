from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .base import CamelModel


class ChatRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=2000)


class ChatResponse(BaseModel):
    response: str


class ChatHistoryItem(BaseModel):
    sender: str
    message: str
    timestamp: datetime

    model_config = {
        "from_attributes": True,
    }


class ChatHistoryResponse(BaseModel):
    history: list[ChatHistoryItem]


class SuggestionsRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    recent_moods: list[str] | None = Field(default=None, max_length=50)


class SuggestionsResponse(BaseModel):
    suggestions: list[str]
    source: str
