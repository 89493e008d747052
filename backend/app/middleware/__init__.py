"""HTTP middleware for MoodBuddy."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
