"""Unit tests for the rule-based task extractors."""
from __future__ import annotations

from datetime import datetime

import pytest

from voice_tasks import logic
from voice_tasks.schema import Priority, Status, TaskDraft


def test_dentist_reminder_scenario(anchor: datetime) -> None:
    draft = logic.extract_task_draft(
        "remind me to call the dentist tomorrow evening, it's urgent", anchor
    )

    assert draft.title == "Call the dentist"
    assert draft.priority is Priority.CRITICAL
    assert draft.status is Status.TODO
    assert draft.due_date == datetime(2024, 1, 11, 18, 0)
    assert draft.description == ""


def test_report_due_friday(anchor: datetime) -> None:
    draft = logic.extract_task_draft("finish the report by friday", anchor)

    assert draft.title == "Finish the report"
    assert draft.due_date == datetime(2024, 1, 12, 0, 0)
    assert draft.status is Status.TODO


def test_low_priority_prefix(anchor: datetime) -> None:
    draft = logic.extract_task_draft("low priority: water the plants", anchor)

    assert draft.priority is Priority.LOW
    assert draft.title == "Water the plants"


def test_past_month_day_moves_to_next_year() -> None:
    now = datetime(2024, 6, 1, 12, 0)

    draft = logic.extract_task_draft("meeting on march 5 at 9:00 p.m", now)

    assert draft.due_date == datetime(2025, 3, 5, 21, 0)
    assert draft.title == "Meeting"


def test_task_done_keeps_transcript_as_title(anchor: datetime) -> None:
    draft = logic.extract_task_draft("task done", anchor)

    assert draft.status is Status.DONE
    assert draft.due_date is None
    assert draft.title == "Task done"


def test_plain_sentence_falls_back_to_defaults(anchor: datetime) -> None:
    draft = logic.extract_task_draft("buy oat milk", anchor)

    assert draft == TaskDraft(title="Buy oat milk")


@pytest.mark.parametrize(
    "transcript",
    [
        "urgent and important: renew the passport",
        "this is important, also urgent",
        "high priority but really critical",
    ],
)
def test_critical_beats_high(transcript: str) -> None:
    assert logic.extract_priority(transcript.lower()) is Priority.CRITICAL


@pytest.mark.parametrize(
    ("transcript", "expected"),
    [
        ("fix the login bug asap", Priority.CRITICAL),
        ("an important call with legal", Priority.HIGH),
        ("we must ship the release", Priority.HIGH),
        ("clean the garage someday", Priority.LOW),
        ("highlight the quarterly numbers", Priority.MEDIUM),
        ("water the plants", Priority.MEDIUM),
    ],
)
def test_extract_priority(transcript: str, expected: Priority) -> None:
    assert logic.extract_priority(transcript) is expected


@pytest.mark.parametrize(
    ("transcript", "expected"),
    [
        ("i am working on the slides", Status.IN_PROGRESS),
        ("deploy is in progress", Status.IN_PROGRESS),
        ("the migration is completed", Status.DONE),
        ("finished the laundry", Status.DONE),
        ("the abandoned cart email", Status.TODO),
        ("finish the report", Status.TODO),
    ],
)
def test_extract_status(transcript: str, expected: Status) -> None:
    assert logic.extract_status(transcript) is expected


def test_in_progress_wins_over_done() -> None:
    assert logic.extract_status("working on it, almost done") is Status.IN_PROGRESS


@pytest.mark.parametrize(
    ("transcript", "expected"),
    [
        ("Create a task to review PR 42", "Review PR 42"),
        ("todo: Book flights to Lisbon", "Book flights to Lisbon"),
        ("new task prepare the Q3 budget", "Prepare the Q3 budget"),
        ("I need to email Sarah before noon", "Email Sarah"),
        ("pay rent next week", "Pay rent"),
        ("renew the car insurance in 3 days", "Renew the car insurance"),
        ("send invoice next monday", "Send invoice"),
        ("call the bank at 3 pm, ask about the card", "Call the bank"),
        ("make dinner reservations this evening", "Dinner reservations"),
        ("call mom tonight", "Call mom"),
        ("buy eggs, milk and bread", "Buy eggs, milk and bread"),
        ("tomorrow, call the plumber", "Call the plumber"),
    ],
)
def test_clean_title(transcript: str, expected: str) -> None:
    assert logic.clean_title(transcript) == expected


def test_clean_title_keeps_case() -> None:
    assert logic.clean_title("remind me to ping McKenzie about the API") == "Ping McKenzie about the API"


def test_clean_title_falls_back_when_nothing_is_left() -> None:
    assert logic.clean_title("urgent") == "Urgent"
    assert logic.clean_title("by tomorrow") == "By tomorrow"


def test_extract_description_uses_first_good_separator() -> None:
    description = logic.extract_description(
        "Plan the offsite, book a venue for forty people"
    )

    assert description == "book a venue for forty people"


def test_extract_description_skips_short_candidates() -> None:
    transcript = "Pack bags - for the trip to Oslo, asap"

    assert logic.extract_description(transcript) == "for the trip to Oslo, asap"


def test_extract_description_strips_date_and_priority_noise() -> None:
    description = logic.extract_description(
        "Prepare slides: cover the roadmap tomorrow, urgent"
    )

    assert description == "cover the roadmap"


def test_extract_description_rejects_overlong_candidates() -> None:
    transcript = "Write notes, " + "x" * 250

    assert logic.extract_description(transcript) == ""


def test_extract_description_empty_without_separator() -> None:
    assert logic.extract_description("buy oat milk") == ""


def test_normalize_exposes_both_views() -> None:
    text = logic.normalize("  Call   Bob — about  Q3 ")

    assert text.original == "Call Bob - about Q3"
    assert text.lowered == "call bob - about q3"


@pytest.mark.parametrize(
    "transcript",
    ["a", "!!", "urgent asap", "done", "by friday", "  x  ", "tomorrow"],
)
def test_title_is_never_empty(transcript: str, anchor: datetime) -> None:
    draft = logic.extract_task_draft(transcript, anchor)

    assert len(draft.title) >= 1
    assert isinstance(draft.priority, Priority)
    assert isinstance(draft.status, Status)


def test_extraction_is_deterministic(anchor: datetime) -> None:
    transcript = "submit taxes on 4/15 at 5pm, it's important"

    first = logic.extract_task_draft(transcript, anchor)
    second = logic.extract_task_draft(transcript, anchor)

    assert first == second
    assert first.due_date == datetime(2024, 4, 15, 17, 0)
    assert first.priority is Priority.HIGH
