"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from prockill import process_killer
from prockill.config import runtime
from prockill.config.settings import get_killer_settings


@pytest.fixture(autouse=True)
def _isolate_configuration(monkeypatch, tmp_path):
    """Keep developer .env files and cached settings out of every test."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (tmp_path / ".env",))
    for name in ("PROCKILL_ESCALATION_POLL_SECONDS", "PROCKILL_QUIET", "PROCKILL_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    runtime.reset_default_values()
    get_killer_settings.cache_clear()
    monkeypatch.setattr(process_killer, "_default_killer", None)
    yield
    runtime.reset_default_values()
    get_killer_settings.cache_clear()
