"""OpenAI-backed task extraction strategy for Voice Tasks."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List

from . import llm

_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts structured task data from "
    "natural language. Always return valid JSON only."
)
_TEMPERATURE = 0.3
_MAX_OUTPUT_TOKENS = 300


def extract(text: str, timeout_ms: int, model: str, now: datetime) -> Dict[str, object]:
    """Ask the OpenAI API for a task draft payload for ``text``."""

    prompt = llm.build_prompt(text, now)
    timeout_s = _coerce_timeout(timeout_ms)
    client = _create_client(timeout_s)

    response_text = _call_openai(client, model=model, prompt=prompt, timeout_s=timeout_s)
    return llm.parse_json_block(response_text)


def _coerce_timeout(timeout_ms: int | None) -> float | None:
    if not timeout_ms or timeout_ms <= 0:
        return None
    return timeout_ms / 1000.0


def _create_client(timeout_s: float | None):
    from openai import OpenAI  # Lazy import keeps the deterministic path dependency-free

    client = OpenAI()
    if timeout_s is not None:
        with_options = getattr(client, "with_options", None)
        if callable(with_options):
            client = with_options(timeout=timeout_s)
    return client


def _call_openai(client, *, model: str, prompt: str, timeout_s: float | None) -> str:
    try:
        return _call_responses_api(client, model=model, prompt=prompt, timeout_s=timeout_s)
    except Exception:
        return _call_chat_completions_api(client, model=model, prompt=prompt, timeout_s=timeout_s)


def _call_responses_api(client, *, model: str, prompt: str, timeout_s: float | None) -> str:
    kwargs: Dict[str, Any] = {
        "model": model,
        "instructions": _SYSTEM_PROMPT,
        "input": prompt,
        "temperature": _TEMPERATURE,
        "max_output_tokens": _MAX_OUTPUT_TOKENS,
    }
    if timeout_s is not None:
        kwargs["timeout"] = timeout_s
    response = client.responses.create(**kwargs)

    output_text = getattr(response, "output_text", None)
    if isinstance(output_text, str) and output_text.strip():
        return output_text

    text_parts: List[str] = []
    for item in _ensure_iterable(getattr(response, "output", None) or []):
        content = getattr(item, "content", None)
        if content is None and isinstance(item, dict):
            content = item.get("content")
        text = _normalise_message_content(content)
        if text:
            text_parts.append(text)
    if text_parts:
        return "".join(text_parts)

    raise ValueError("OpenAI Responses API did not return text output")


def _call_chat_completions_api(client, *, model: str, prompt: str, timeout_s: float | None) -> str:
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": _TEMPERATURE,
        "max_tokens": _MAX_OUTPUT_TOKENS,
        "response_format": {"type": "json_object"},
    }
    if timeout_s is not None:
        kwargs["timeout"] = timeout_s

    completions = client.chat.completions
    try:
        completion = completions.create(**kwargs)
    except TypeError:
        kwargs.pop("response_format", None)
        completion = completions.create(**kwargs)

    choices = getattr(completion, "choices", None)
    if not choices and isinstance(completion, dict):
        choices = completion.get("choices")
    if not choices:
        raise ValueError("OpenAI Chat Completions API returned no choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else getattr(first, "message", None)
    if message is None:
        raise ValueError("OpenAI Chat Completions choice missing message content")

    content = message.get("content") if isinstance(message, dict) else getattr(message, "content", None)
    text = _normalise_message_content(content)
    if not text:
        raise ValueError("OpenAI Chat Completions message contained no text")
    return text


def _normalise_message_content(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        pieces: List[str] = []
        for part in content:
            if isinstance(part, str):
                pieces.append(part)
            elif isinstance(part, dict):
                text = part.get("text") or part.get("value")
                if text:
                    pieces.append(text)
            else:
                text = getattr(part, "text", None)
                if isinstance(text, str):
                    pieces.append(text)
        return "".join(pieces)
    text = getattr(content, "text", None)
    return text if isinstance(text, str) else ""


def _ensure_iterable(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple)):
        return value
    return [value]
