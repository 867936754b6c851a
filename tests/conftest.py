"""Shared fixtures. Registry payload fixtures live in the test modules."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
from fakes import SAMPLE_PUBSPEC, FakeRunner, RecordingNotifier, RecordingView

from pubsuggest.config import LoggingSettings, Settings, SuggestionSettings
from pubsuggest.logging_config import configure_logging
from pubsuggest.state import AppState, build_state


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A project root with the sample pubspec.yaml."""
    (tmp_path / "pubspec.yaml").write_text(SAMPLE_PUBSPEC, encoding="utf-8")
    return tmp_path


@pytest.fixture()
def settings() -> Settings:
    return Settings(suggestions=SuggestionSettings(debounce_ms=0, manifest_save_debounce_ms=0))


@pytest.fixture()
async def app_state(
    settings: Settings, project: Path, notifier: RecordingNotifier, runner: FakeRunner
) -> AsyncIterator[AppState]:
    """Fully wired AppState over the sample project. HTTP is mocked per test with respx."""
    async with httpx.AsyncClient() as client:
        state = build_state(settings, project, notifier, client, runner)
        yield state
        state.watcher.dispose()


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    """Route log output to stderr and drop debug/info so stdout stays assertable."""
    configure_logging(LoggingSettings(level="WARNING", format="text"))
