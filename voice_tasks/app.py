"""Flask application exposing the Voice Tasks transcript parser."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import Any, Callable, Mapping

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from . import adapter, config, extractor, metrics
from .safety import RateLimiter, client_identity, sanitize_for_log

logger = logging.getLogger(__name__)

TRANSCRIPT_REQUIRED = "Transcript is required and must be a non-empty string"

app = Flask(__name__)
app.config.setdefault(
    "RATE_LIMITER",
    RateLimiter(config.get_rate_limit(), config.get_rate_window_s()),
)
app.config.setdefault("CLOCK", datetime.now)


def _get_rate_limiter() -> RateLimiter:
    limiter = app.config.get("RATE_LIMITER")
    if isinstance(limiter, RateLimiter):
        return limiter

    limiter = RateLimiter(config.get_rate_limit(), config.get_rate_window_s())
    app.config["RATE_LIMITER"] = limiter
    return limiter


def _now() -> datetime:
    clock: Callable[[], datetime] = app.config.get("CLOCK") or datetime.now
    return clock()


def _read_transcript() -> Any:
    payload = request.get_json(silent=True)
    if isinstance(payload, Mapping):
        return payload.get("transcript")
    return request.form.get("transcript")


def _error(message: str, status: int) -> tuple[Response, int]:
    return jsonify({"error": message}), status


@app.post("/api/voice/parse")
def parse_voice() -> tuple[Response, int] | Response:
    metrics.inc("requests_total")
    provider_id = config.get_provider()
    identity = client_identity(request.headers, request.remote_addr)
    limiter = _get_rate_limiter()

    if not limiter.allow(identity):
        metrics.inc("rate_limit_hits_total")
        logger.warning("Rate limit exceeded for %s", sanitize_for_log(identity))
        _log_parse_event(provider_id, False, 0, 0.0, fallback="rate_limit")
        response, status = _error("Too many requests. Try again later.", 429)
        response.headers["Retry-After"] = str(limiter.retry_after(identity))
        return response, status

    raw_transcript = _read_transcript()
    if not isinstance(raw_transcript, str) or not raw_transcript.strip():
        metrics.inc("rejected_inputs_total", {"reason": "empty_input"})
        _log_parse_event(provider_id, False, 0, 0.0, fallback="empty_input")
        return _error(TRANSCRIPT_REQUIRED, 400)

    transcript = raw_transcript.strip()
    max_chars = config.get_max_chars()
    if len(transcript) > max_chars:
        metrics.inc("rejected_inputs_total", {"reason": "input_too_long"})
        _log_parse_event(provider_id, False, len(transcript), 0.0, fallback="input_too_long")
        return _error(f"Trim input to {max_chars:,} characters.", 413)

    model_attempted = provider_id != "logic"
    start_time = time.perf_counter()
    draft, used_model_assist = extractor.extract_draft(
        transcript, provider_id, config.get_timeout_ms(), _now()
    )
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    if model_attempted:
        metrics.inc("llm_calls_total")
        metrics.inc("llm_latency_ms_sum", value=duration_ms)

    path_label = _parse_path_label(provider_id, used_model_assist)
    metrics.inc("parses_total", {"path": path_label})
    _log_parse_event(
        provider_id,
        used_model_assist,
        len(transcript),
        duration_ms,
        fallback="provider_error" if path_label == "fallback" else None,
    )

    return jsonify(
        {
            "success": True,
            "transcript": transcript,
            "parsed": adapter.to_api(draft),
            "modelAssist": used_model_assist,
        }
    )


@app.get("/health")
def health() -> Response:
    return jsonify({"status": "ok"})


@app.get("/metrics")
def metrics_endpoint() -> Response:
    metrics.inc("requests_total")
    response = Response(metrics.to_prometheus())
    response.content_type = "text/plain; charset=utf-8"
    return response


@app.errorhandler(HTTPException)
def handle_http_error(exc: HTTPException) -> tuple[Response, int]:
    return jsonify({"error": exc.name, "message": exc.description}), exc.code or 500


@app.errorhandler(Exception)
def handle_unexpected_error(exc: Exception) -> tuple[Response, int]:
    logger.exception("Unhandled error while serving %s", sanitize_for_log(request.path))
    return _error("Internal Server Error", 500)


def _parse_path_label(provider_id: str, used_model_assist: bool) -> str:
    provider_key = provider_id or "logic"
    if provider_key == "logic":
        return "logic"
    if used_model_assist:
        return provider_key
    return "fallback"


def _log_parse_event(
    provider_id: str,
    used_model_assist: bool,
    input_chars: int,
    duration_ms: float,
    *,
    fallback: str | None,
) -> None:
    payload = {
        "event": "parse",
        "provider": sanitize_for_log(provider_id) if provider_id else "",
        "used_assist": used_model_assist,
        "input_chars": int(input_chars),
        "duration_ms": round(duration_ms, 3),
        "fallback": sanitize_for_log(fallback) if fallback else None,
    }
    logger.info(json.dumps(payload))


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True)
