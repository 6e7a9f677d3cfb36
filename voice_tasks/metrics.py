"""Minimal in-memory counters and Prometheus exposition helpers."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Mapping, Tuple

PARSE_PATHS = ("logic", "fake", "openai", "fallback")

counters: Dict[str, float] = {
    "requests_total": 0.0,
    "rate_limit_hits_total": 0.0,
    "llm_calls_total": 0.0,
    "llm_latency_ms_sum": 0.0,
}

parses_total: Dict[str, float] = {path: 0.0 for path in PARSE_PATHS}

_labelled_counters: Dict[str, Dict[Tuple[Tuple[str, str], ...], float]] = defaultdict(
    lambda: defaultdict(float)
)


def inc(name: str, labels: Mapping[str, str] | None = None, value: float = 1.0) -> None:
    """Increment the named counter in-memory."""

    if labels:
        if name == "parses_total":
            path = labels.get("path", "fallback")
            parses_total[path] = parses_total.get(path, 0.0) + value
            return
        label_key = tuple(sorted((str(k), str(v)) for k, v in labels.items()))
        _labelled_counters[name][label_key] += value
        return

    counters[name] = counters.get(name, 0.0) + value


def to_prometheus() -> str:
    """Return a Prometheus text exposition payload for the recorded metrics."""

    lines = []

    def add_metric(name: str, metric_value: float, labels: Mapping[str, str] | None = None) -> None:
        formatted_value = _format_value(metric_value)
        if labels:
            label_parts = ",".join(
                f"{key}=\"{_escape_label_value(value)}\"" for key, value in sorted(labels.items())
            )
            lines.append(f"{name}{{{label_parts}}} {formatted_value}")
        else:
            lines.append(f"{name} {formatted_value}")

    for name, value in counters.items():
        add_metric(name, value)

    for path, count in sorted(parses_total.items()):
        add_metric("parses_total", count, {"path": path})

    for name, entries in sorted(_labelled_counters.items()):
        for label_key, value in sorted(entries.items()):
            add_metric(name, value, dict(label_key))

    return "\n".join(lines) + "\n"


def _format_value(value: float) -> str:
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def _escape_label_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("\n", "\\n")
    return escaped.replace('"', '\\"')
