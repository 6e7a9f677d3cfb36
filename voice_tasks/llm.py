"""LLM integration helpers for Voice Tasks."""
from __future__ import annotations

import json
import re
import textwrap
from datetime import datetime
from typing import Any, Dict

_PROMPT_TEMPLATE = textwrap.dedent(
    """
    You are a task parsing assistant. Extract task information from the
    spoken input below and respond with a JSON object that matches the
    following schema:
    {{
      "title": "short task title",
      "description": "extra context or an empty string",
      "priority": "Low" | "Medium" | "High" | "Critical",
      "status": "To Do" | "In Progress" | "Done",
      "dueDate": "local ISO 8601 datetime such as 2024-01-15T18:00:00, or null"
    }}

    Rules:
    - Title: the main action, without filler such as "remind me to" or
      "create a task to", and without date or priority wording.
    - Priority: "urgent", "asap" and "critical" mean Critical; "important" and
      "high priority" mean High; "low priority" means Low; otherwise Medium.
    - Status: "To Do" unless the input says the work is in progress or done.
    - Due date: resolve relative dates ("tomorrow evening", "next Monday",
      "in 3 days") and absolute dates ("15th January", "Jan 20 at 9 p.m")
      against the current local time below. Times are LOCAL time; do not
      convert to UTC and do not add an offset. Use null when no date is given.
    - The JSON must be valid and parsable without additional commentary.

    Current local time: {now}

    Input:
    ---
    {transcript}
    ---
    """
)


_DEFENSIVE_DECODER = json.JSONDecoder()
_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


def build_prompt(transcript: str, now: datetime) -> str:
    """Return the LLM prompt for a transcript anchored at ``now``."""

    clean_transcript = transcript.strip() if transcript else ""
    if not clean_transcript:
        clean_transcript = "(No transcript content provided.)"
    anchor = f"{now.strftime('%A')} {now.replace(microsecond=0).isoformat()}"
    return _PROMPT_TEMPLATE.format(transcript=clean_transcript, now=anchor)


def _decode_candidate(snippet: str) -> Dict[str, Any] | None:
    try:
        payload = json.loads(snippet)
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def parse_json_block(text: str) -> Dict[str, Any]:
    """Extract and parse the first JSON object embedded in ``text``."""

    direct = _decode_candidate(text.strip())
    if direct is not None:
        return direct

    for match in _CODE_FENCE_RE.finditer(text):
        candidate = _decode_candidate(match.group(1).strip())
        if candidate is not None:
            return candidate

    start = 0
    while True:
        brace = text.find("{", start)
        if brace == -1:
            break
        try:
            payload, offset = _DEFENSIVE_DECODER.raw_decode(text[brace:])
        except json.JSONDecodeError:
            start = brace + 1
            continue
        if isinstance(payload, dict):
            return payload
        start = brace + offset

    raise ValueError("No JSON object found in text")
