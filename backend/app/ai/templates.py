from __future__ import annotations

from ..insights.dashboard import NEUTRAL_MOOD

SYSTEM_PROMPT = (
    "You are MoodBuddy, a professional emotional support AI. Always reply politely, "
    "in a comforting and empathetic tone, limited to 4 lines. Respond like a human "
    "counselor trained in positive psychology."
)

COMFORT_SUFFIX = " try to make me comfortable and send appropriate answer to boost my self"

SUGGESTION_TABLE: dict[str, list[str]] = {
    "😢": [
        "Reach out to someone you trust and tell them how you feel today.",
        "Write down three small things that went okay, however minor.",
        "Step outside for ten minutes of fresh air and slow breathing.",
    ],
    "😟": [
        "Try box breathing: inhale 4, hold 4, exhale 4, hold 4, for two minutes.",
        "Pick one worry and write the next small step you could take on it.",
        "Put on a song you love and give yourself a short break.",
    ],
    "😐": [
        "Take a 10-minute walk and notice five things around you.",
        "Drink a glass of water and stretch for a few minutes.",
        "Send a kind message to a friend you haven't talked to lately.",
    ],
    "😊": [
        "Note what made today good so you can come back to it later.",
        "Share the good energy: compliment someone sincerely today.",
        "Use the momentum to start a small task you've been putting off.",
    ],
    "😁": [
        "Celebrate the moment: write a short gratitude note about today.",
        "Plan something fun with people who make you feel this way.",
        "Try something creative while your energy is high.",
    ],
}


def table_suggestions(mood: str, limit: int = 3) -> list[str]:
    """Canned coping suggestions for a mood, neutral ones for unknown symbols."""

    options = SUGGESTION_TABLE.get(mood) or SUGGESTION_TABLE[NEUTRAL_MOOD]
    return options[:limit]


def suggestion_prompt(recent_moods: list[str]) -> str:
    return (
        f"Based on these recent mood entries: {', '.join(recent_moods)}, provide 3 "
        "personalized, actionable suggestions to improve mood. Keep each suggestion under "
        "50 words and make them positive and encouraging. Format as a simple numbered list."
    )
