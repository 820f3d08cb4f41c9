from __future__ import annotations

import pytest
import structlog

from http_api_problem.config.settings import get_settings


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch):
    for name in ("TYPE_URL_TEMPLATE", "FALLBACK_STATUS", "LOG_RESERVED_COLLISIONS"):
        monkeypatch.delenv(f"HTTP_API_PROBLEM_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
