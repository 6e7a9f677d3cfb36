"""Utilities to adapt task drafts for the JSON API."""
from __future__ import annotations

from typing import Any, Dict

from .schema import TaskDraft


def to_api(draft: TaskDraft) -> Dict[str, Any]:
    """Return the camelCase payload the task API and UI consume."""

    due = draft.due_date
    return {
        "title": draft.title,
        "description": draft.description,
        "priority": draft.priority.value,
        "status": draft.status.value,
        "dueDate": due.replace(microsecond=0).isoformat() if due is not None else None,
    }
