"""WorkInfo: digital business cards served by FastAPI."""
