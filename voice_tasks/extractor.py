"""Task draft extraction orchestrator for Voice Tasks.

The deterministic engine in :mod:`logic` and the model-backed providers are
interchangeable strategies. Model output is validated field by field; invalid
fields are filled from the deterministic draft and any provider failure falls
back to it entirely.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Tuple

from . import config, llm_fake, llm_openai, logic, schema

logger = logging.getLogger(__name__)

Strategy = Callable[[str, int, datetime], Mapping[str, Any]]

DRAFT_FIELDS = ("title", "description", "priority", "status", "due_date")


def _fake_strategy(text: str, timeout_ms: int, now: datetime) -> Mapping[str, Any]:
    return llm_fake.extract(text, now)


def _openai_strategy(text: str, timeout_ms: int, now: datetime) -> Mapping[str, Any]:
    return llm_openai.extract(text, timeout_ms, config.get_openai_model(), now)


MODEL_STRATEGIES: Dict[str, Strategy] = {
    "fake": _fake_strategy,
    "openai": _openai_strategy,
}


def extract_draft(
    text: str, provider: str, timeout_ms: int, now: datetime
) -> Tuple[schema.TaskDraft, bool]:
    """Return a task draft and whether model assist contributed to it."""

    provider_id = (provider or "").strip().lower()
    baseline = logic.extract_task_draft(text, now)
    if provider_id in ("", "logic"):
        return baseline, False

    try:
        candidate = _extract_with_provider(text, provider_id, timeout_ms, now)
        fields = schema.validate_draft_payload(candidate)
    except Exception:
        logger.exception("Provider '%s' failed; falling back to logic baseline", provider_id)
        return baseline, False

    if not fields:
        logger.info("Provider '%s' returned no valid fields; using logic baseline", provider_id)
        return baseline, False

    missing = [name for name in DRAFT_FIELDS if name not in fields]
    if missing:
        logger.info(
            "Provider '%s' returned no valid %s; using logic baseline for those fields",
            provider_id,
            ", ".join(missing),
        )
    return merge_drafts(fields, baseline), True


def merge_drafts(fields: Mapping[str, Any], baseline: schema.TaskDraft) -> schema.TaskDraft:
    """Overlay validated model ``fields`` onto the deterministic ``baseline``."""

    return baseline.with_fields(**{name: fields[name] for name in DRAFT_FIELDS if name in fields})


def _extract_with_provider(
    text: str, provider_id: str, timeout_ms: int, now: datetime
) -> Mapping[str, Any]:
    strategy = MODEL_STRATEGIES.get(provider_id)
    if strategy is None:
        raise RuntimeError(f"Provider '{provider_id}' not implemented (timeout {timeout_ms} ms)")
    return strategy(text, timeout_ms, now)
