"""Text generation, coping suggestions and the chat companion."""

from .companion import ChatCompanion
from .openai_client import AIUnavailable, OpenAIClient
from .suggestions import SuggestionResult, SuggestionSelector, dominant_mood, parse_suggestions

__all__ = [
    "AIUnavailable",
    "ChatCompanion",
    "OpenAIClient",
    "SuggestionResult",
    "SuggestionSelector",
    "dominant_mood",
    "parse_suggestions",
]
