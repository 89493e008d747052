from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "moodbuddy_requests_total",
    "Total HTTP requests processed by MoodBuddy",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "moodbuddy_request_latency_seconds",
    "HTTP request latency in seconds",
    ("method", "path"),
)

REQUEST_ERRORS = Counter(
    "moodbuddy_request_errors_total",
    "HTTP requests resulting in server errors",
    ("method", "path", "status"),
)

USER_API_COUNTER = Counter(
    "moodbuddy_user_api_hits_total",
    "API hits per endpoint",
    ("endpoint",),
)

AI_REQUESTS = Counter(
    "moodbuddy_ai_requests_total",
    "Text generation requests by kind and outcome",
    ("kind", "outcome"),
)

CHAT_PERSIST_FAILURES = Counter(
    "moodbuddy_chat_persist_failures_total",
    "Chat turns that could not be mirrored to the store",
)

__all__ = [
    "AI_REQUESTS",
    "CHAT_PERSIST_FAILURES",
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
    "USER_API_COUNTER",
]
