"""Request and response models for the MoodBuddy API."""
