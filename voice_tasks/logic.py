"""Rule-based task extraction for Voice Tasks."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .schema import Priority, Status, TaskDraft
from .temporal import WEEKDAYS, resolve_due_date


# Checked in severity order; the first level with a matching keyword wins.
PRIORITY_KEYWORDS: Tuple[Tuple[Priority, Tuple[str, ...]], ...] = (
    (Priority.CRITICAL, ("critical", "urgent", "urgently", "asap", "immediately", "emergency")),
    (Priority.HIGH, ("high priority", "important", "high", "must")),
    (Priority.LOW, ("low priority", "low", "whenever", "eventually", "someday")),
)

STATUS_KEYWORDS: Tuple[Tuple[Status, Tuple[str, ...]], ...] = (
    (Status.IN_PROGRESS, ("in progress", "working on")),
    (Status.DONE, ("done", "completed", "finished")),
)

DESCRIPTION_SEPARATORS = (",", " - ", ":", " and ", " also ")

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 200
UNTITLED = "Untitled task"

_FILLER_RE = re.compile(
    r"^(?:(?:remind me to|create a task to|i need to|create|make)\b|(?:todo|(?:add |new )?task)\b:?)\s*",
    re.IGNORECASE,
)
_PRIORITY_PHRASE_RE = re.compile(
    r"\b(?:high|low|medium|critical|urgent|important)\s+priority\b", re.IGNORECASE
)
_PRIORITY_WORD_RE = re.compile(r"\b(?:urgent|critical|important|asap)\b", re.IGNORECASE)
_DATE_CLAUSE_RE = re.compile(
    r"\b(?:by|before|on|due|at|until)\s+[^,]*?(?=,|\.(?:\s|$)|$)", re.IGNORECASE
)
_RELATIVE_DAY_RE = re.compile(
    r"\b(?:today|tonight|tomorrow|next\s+week|next\s+(?:%s)|in\s+\d+\s+days?)\b"
    % "|".join(sorted(WEEKDAYS, key=len, reverse=True)),
    re.IGNORECASE,
)
_DAY_PART_RE = re.compile(r"\b(?:this\s+)?(?:morning|afternoon|evening)\b", re.IGNORECASE)
_CLOCK_RE = re.compile(r"\b\d{1,2}(?::\d{2})?\s*(?:a\.?m\.?|p\.?m\.?)(?![a-z])", re.IGNORECASE)
_STATUS_WORD_RE = re.compile(r"\b(?:to do|in progress|done|completed|finished)\b", re.IGNORECASE)
_DESCRIPTION_NOISE_RE = re.compile(
    r"\b(?:by|before|on|due|at|tomorrow|next week|high priority|low priority|critical|urgent)\b",
    re.IGNORECASE,
)
_EDGE_PUNCTUATION = " ,-.:;"


@dataclass(frozen=True)
class Transcript:
    """Original-case and lower-case views of one transcript."""

    original: str
    lowered: str


def normalize(text: str) -> Transcript:
    """Collapse whitespace and expose the case-preserving and lowered views."""

    original = _normalize_whitespace(text or "")
    return Transcript(original=original, lowered=original.lower())


def extract_priority(lowered: str) -> Priority:
    """Return the most severe priority mentioned, ``Medium`` when none is."""

    for level, keywords in PRIORITY_KEYWORDS:
        if any(_has_phrase(lowered, keyword) for keyword in keywords):
            return level
    return Priority.MEDIUM


def extract_status(lowered: str) -> Status:
    """Return the status a transcript states explicitly, ``To Do`` otherwise."""

    for status, phrases in STATUS_KEYWORDS:
        if any(_has_phrase(lowered, phrase) for phrase in phrases):
            return status
    return Status.TODO


def clean_title(original: str) -> str:
    """Strip filler, priority, date and status wording from a transcript.

    Falls back to the transcript itself when too little is left.
    """
    stripped = _FILLER_RE.sub("", original.strip())

    title = _PRIORITY_PHRASE_RE.sub("", stripped)
    title = _PRIORITY_WORD_RE.sub("", title)

    title = _DATE_CLAUSE_RE.sub("", title)
    title = _RELATIVE_DAY_RE.sub("", title)
    title = _DAY_PART_RE.sub("", title)
    title = _CLOCK_RE.sub("", title)

    title = _STATUS_WORD_RE.sub("", title)

    if "," in title and title != stripped:
        # a clause that carried removed wording belongs to the description
        head = _trim(title.split(",", 1)[0])
        if len(head) >= MIN_TITLE_LENGTH:
            title = head
    title = _trim(title)

    if len(title) < MIN_TITLE_LENGTH:
        title = original.strip() or UNTITLED
    return sentence_case(title)


def extract_description(original: str) -> str:
    """Return the first trailing clause that reads like a description."""

    for separator in DESCRIPTION_SEPARATORS:
        if separator not in original:
            continue
        candidate = original.split(separator, 1)[1]
        candidate = _trim(_DESCRIPTION_NOISE_RE.sub("", candidate))
        if MIN_DESCRIPTION_LENGTH < len(candidate) < MAX_DESCRIPTION_LENGTH:
            return candidate
    return ""


def extract_task_draft(transcript: str, now: datetime) -> TaskDraft:
    """Build a task draft from ``transcript`` with dates anchored at ``now``."""
    text = normalize(transcript)
    return TaskDraft(
        title=clean_title(text.original),
        description=extract_description(text.original),
        priority=extract_priority(text.lowered),
        status=extract_status(text.lowered),
        due_date=resolve_due_date(text.original, text.lowered, now),
    )


# Helper functions ---------------------------------------------------------


def _normalize_whitespace(text: str) -> str:
    text = text.replace("\u2013", "-").replace("\u2014", "-")
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def _has_phrase(lowered: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", lowered) is not None


def _trim(text: str) -> str:
    text = re.sub(r"\s+", " ", text)
    return text.strip(_EDGE_PUNCTUATION)


def sentence_case(text: Optional[str]) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        return ""
    return cleaned[:1].upper() + cleaned[1:]
