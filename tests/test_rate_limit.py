"""Rate limiting behavior for the Voice Tasks app."""
from __future__ import annotations

import pytest

from voice_tasks.app import app
from voice_tasks.safety import RateLimiter, client_identity, sanitize_for_log

app.config.update(TESTING=True)


def test_parse_post_rate_limited(monkeypatch) -> None:
    """Rapid submissions from the same client yield a 429 response."""

    limiter = RateLimiter(max_requests=2, window_seconds=60.0)
    monkeypatch.setitem(app.config, "RATE_LIMITER", limiter)

    with app.test_client() as client:
        first = client.post("/api/voice/parse", json={"transcript": "call mom"})
        second = client.post("/api/voice/parse", json={"transcript": "call mom"})
        third = client.post("/api/voice/parse", json={"transcript": "call mom"})
        other = client.post(
            "/api/voice/parse",
            json={"transcript": "call mom"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )

    assert first.status_code == 200
    assert second.status_code == 200
    assert third.status_code == 429
    assert third.get_json() == {"error": "Too many requests. Try again later."}
    assert 1 <= int(third.headers["Retry-After"]) <= 60
    assert other.status_code == 200


def test_sliding_window_releases_old_events() -> None:
    limiter = RateLimiter(max_requests=1, window_seconds=10.0)

    assert limiter.allow("a", now=0.0) is True
    assert limiter.allow("a", now=5.0) is False
    assert limiter.retry_after("a", now=5.0) == 5
    assert limiter.allow("a", now=10.5) is True
    assert limiter.retry_after("b", now=10.5) == 0


def test_zero_limit_blocks_everything() -> None:
    limiter = RateLimiter(max_requests=0, window_seconds=1.0)

    assert limiter.allow("a", now=0.0) is False
    assert limiter.retry_after("a", now=0.0) == 1


def test_rate_limiter_rejects_bad_configuration() -> None:
    with pytest.raises(ValueError):
        RateLimiter(max_requests=-1, window_seconds=1.0)
    with pytest.raises(ValueError):
        RateLimiter(max_requests=1, window_seconds=0)


def test_client_identity_prefers_forwarded_header() -> None:
    assert client_identity({"X-Forwarded-For": " 198.51.100.2 , 10.0.0.1"}, "127.0.0.1") == "198.51.100.2"
    assert client_identity({}, "127.0.0.1") == "127.0.0.1"
    assert client_identity(None, None) == "global"


def test_sanitize_for_log_flattens_and_limits() -> None:
    assert sanitize_for_log("line one\nline\ttwo\x00", limit=12) == "line one lin"


def test_idle_identities_are_forgotten() -> None:
    limiter = RateLimiter(max_requests=1, window_seconds=10.0)

    assert limiter.allow("198.51.100.9", now=0.0) is True
    assert limiter.retry_after("198.51.100.9", now=20.0) == 0
    assert "198.51.100.9" not in limiter._events
    assert limiter.allow("198.51.100.9", now=21.0) is True
