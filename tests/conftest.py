"""Test configuration ensuring project modules are importable."""
from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))


from voice_tasks import app as app_module
from voice_tasks.safety import RateLimiter

# Wednesday morning; every scenario in the suite is anchored here unless noted.
ANCHOR = datetime(2024, 1, 10, 10, 0)


@pytest.fixture
def anchor() -> datetime:
    return ANCHOR


@pytest.fixture(autouse=True)
def isolate_app(monkeypatch) -> None:
    monkeypatch.delenv("VOICE_TASKS_PROVIDER", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setitem(app_module.app.config, "RATE_LIMITER", RateLimiter(100, 60.0))
    monkeypatch.setitem(app_module.app.config, "CLOCK", lambda: ANCHOR)
    yield
