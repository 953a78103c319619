"""Shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from brewteco_mcp.foundation.config import clear_settings_cache
from brewteco_mcp.runtime.observability import CaptureRenderer, set_renderer


@pytest.fixture(autouse=True)
def captured_logs() -> Iterator[CaptureRenderer]:
    """Silence log output and keep entries for assertions."""
    renderer = CaptureRenderer()
    set_renderer(renderer, level=10)
    yield renderer
    set_renderer(CaptureRenderer())


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Isolate settings from the developer's .env file and cache."""
    monkeypatch.chdir(tmp_path)
    for var in ("BREWTECO_API_URL", "BREWTECO_RETRIES", "BREWTECO_TIMEOUT", "MCP_PORT", "BREWTECO_HTTP_PORT"):
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
