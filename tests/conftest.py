"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

# Dialog views and file surfaces are real Qt widgets; keep them off-screen.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from tests.helpers import FakeDialogView  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_view_events() -> None:
    FakeDialogView.events.clear()


@pytest.fixture(autouse=True)
def _isolate_folio_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FOLIO_HOST",
        "FOLIO_USERNAME",
        "FOLIO_TOKEN",
        "FOLIO_AUTO_FILE_MANAGEMENT",
        "FOLIO_DEBUG_LOGGING",
        "FOLIO_LOG_DIR",
        "FOLIO_DEBUG",
        "FOLIO_SETTINGS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
