"""Voice Tasks: turn spoken sentences into structured task drafts."""
from __future__ import annotations

from .logic import extract_task_draft
from .schema import Priority, Status, TaskDraft

__all__ = ["extract_task_draft", "Priority", "Status", "TaskDraft"]
