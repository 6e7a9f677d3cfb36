"""Deterministic fake LLM strategy used in unit tests."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict


def extract(transcript: str, now: datetime) -> Dict[str, Any]:
    """Return a predictable task payload shaped like a model reply."""

    due = datetime(now.year, now.month, now.day, 17, 0) + timedelta(days=1)
    return {
        "title": "Share meeting notes with the wider team",
        "description": "Generated by the fake model provider",
        "priority": "High",
        "status": "To Do",
        "dueDate": due.isoformat(),
    }
