"""Task draft types and validation helpers for Voice Tasks."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, MutableMapping, Optional


MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000


class Priority(str, Enum):
    """Priority levels a task can carry."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Status(str, Enum):
    """Workflow states a task can be in."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


@dataclass(frozen=True)
class TaskDraft:
    """Structured task produced from a transcript, prior to persistence."""

    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    status: Status = Status.TODO
    due_date: Optional[datetime] = None

    def with_fields(self, **changes: Any) -> "TaskDraft":
        """Return a copy of the draft with ``changes`` applied."""

        return replace(self, **changes)


def _label_key(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


_PRIORITY_LABELS = {_label_key(member.value): member for member in Priority}
_STATUS_LABELS = {_label_key(member.value): member for member in Status}


def coerce_priority(value: Any) -> Priority:
    """Return the :class:`Priority` named by ``value``.

    Raises
    ------
    TypeError
        If ``value`` is not a string.
    ValueError
        If ``value`` does not name a priority level.
    """

    if isinstance(value, Priority):
        return value
    if not isinstance(value, str):
        raise TypeError("priority must be a string")
    member = _PRIORITY_LABELS.get(_label_key(value))
    if member is None:
        raise ValueError(f"unknown priority: {value!r}")
    return member


def coerce_status(value: Any) -> Status:
    """Return the :class:`Status` named by ``value`` ("To Do", "todo", "in_progress", ...)."""

    if isinstance(value, Status):
        return value
    if not isinstance(value, str):
        raise TypeError("status must be a string")
    member = _STATUS_LABELS.get(_label_key(value))
    if member is None:
        raise ValueError(f"unknown status: {value!r}")
    return member


def coerce_due_date(value: Any) -> Optional[datetime]:
    """Return ``value`` as a naive local datetime, or ``None`` when absent.

    Date-only values are promoted to midnight. Aware datetimes are converted to
    host local time and made naive so they compare with the engine's output.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text or text.lower() in {"null", "none"}:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"due date is not ISO-8601: {value!r}") from exc
    else:
        raise TypeError("due date must be an ISO-8601 string or null")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def validate_draft_payload(obj: Any) -> Dict[str, Any]:
    """Validate an untrusted draft payload field by field.

    Parameters
    ----------
    obj:
        A mapping as produced by a model provider, using either ``dueDate`` or
        ``due_date`` for the due date.

    Returns
    -------
    dict
        Only the fields that passed validation, already converted to their
        typed form (``title``, ``description``, ``priority``, ``status``,
        ``due_date``). Invalid or missing fields are omitted so the caller can
        fill them from another source.

    Raises
    ------
    TypeError
        If ``obj`` is not a mapping.
    """

    if not isinstance(obj, MutableMapping):
        raise TypeError("draft payload must be a JSON object")

    fields: Dict[str, Any] = {}

    title = obj.get("title")
    if isinstance(title, str) and title.strip():
        fields["title"] = _clamp(title.strip(), MAX_TITLE_LENGTH)

    description = obj.get("description")
    if isinstance(description, str):
        fields["description"] = _clamp(description.strip(), MAX_DESCRIPTION_LENGTH)

    for key, coerce in (("priority", coerce_priority), ("status", coerce_status)):
        if key not in obj:
            continue
        try:
            fields[key] = coerce(obj[key])
        except (TypeError, ValueError):
            continue

    due_key = "dueDate" if "dueDate" in obj else "due_date"
    if due_key in obj:
        try:
            fields["due_date"] = coerce_due_date(obj[due_key])
        except (TypeError, ValueError):
            pass

    return fields


def _clamp(value: str, limit: int) -> str:
    return value[:limit]
