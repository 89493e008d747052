from __future__ import annotations

_KEYWORD_REPLIES: tuple[tuple[frozenset[str], str], ...] = (
    (
        frozenset({"sad", "down", "lonely", "cry", "crying", "depressed", "hurt"}),
        "I'm sorry you're feeling this way. Your feelings are valid, and you don't have "
        "to carry them alone. Would it help to talk about what's weighing on you?",
    ),
    (
        frozenset({"anxious", "anxiety", "worried", "stress", "stressed", "nervous", "panic"}),
        "That sounds stressful. Let's slow down together: breathe in for four, hold for "
        "four, and breathe out for six. What feels most pressing right now?",
    ),
    (
        frozenset({"angry", "mad", "frustrated", "annoyed", "furious"}),
        "It makes sense to feel frustrated. Give yourself a moment to pause before "
        "reacting. What happened that brought this up?",
    ),
    (
        frozenset({"happy", "great", "good", "excited", "grateful", "awesome"}),
        "That's wonderful to hear! Take a moment to enjoy it. What made today feel this good?",
    ),
)

_DEFAULT_REPLY = (
    "I'm here to listen. Take a slow breath and tell me a little more about how you're "
    "feeling today."
)


def generate_local_reply(message: str) -> str:
    """Return a deterministic scripted reply when no text generator is configured."""

    words = {word.strip(".,!?;:'\"").lower() for word in message.split()}
    for keywords, reply in _KEYWORD_REPLIES:
        if words & keywords:
            return reply
    return _DEFAULT_REPLY
