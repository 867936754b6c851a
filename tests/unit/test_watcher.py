"""Unit tests for pubsuggest.watcher.ManifestSaveWatcher."""

from __future__ import annotations

import asyncio
from pathlib import Path

from fakes import FakeRunner, RecordingNotifier

from pubsuggest.config import Settings, SuggestionSettings
from pubsuggest.mutation import MutationExecutor, ProcessResult
from pubsuggest.watcher import ManifestSaveWatcher


def make_watcher(
    project: Path, notifier: RecordingNotifier, runner: FakeRunner, **suggestions
) -> ManifestSaveWatcher:
    suggestions.setdefault("manifest_save_debounce_ms", 10)
    settings = Settings(suggestions=SuggestionSettings(**suggestions))
    executor = MutationExecutor(settings.package_manager, project, notifier, runner)
    return ManifestSaveWatcher(executor, settings)


class TestManifestSaveWatcher:
    async def test_manifest_save_triggers_resync(
        self, project: Path, notifier: RecordingNotifier, runner: FakeRunner
    ) -> None:
        watcher = make_watcher(project, notifier, runner)
        assert watcher.on_document_saved(project / "pubspec.yaml")
        assert watcher.pending
        await watcher.wait()
        assert runner.subcommands == ["get"]
        assert notifier.infos == ["Dependencies updated"]

    async def test_other_files_ignored(
        self, project: Path, notifier: RecordingNotifier, runner: FakeRunner
    ) -> None:
        watcher = make_watcher(project, notifier, runner)
        assert not watcher.on_document_saved(project / "lib" / "main.dart")
        assert not watcher.on_document_saved(project / "pubspec.lock")
        assert not watcher.pending
        assert runner.calls == []

    async def test_rapid_saves_collapse(
        self, project: Path, notifier: RecordingNotifier, runner: FakeRunner
    ) -> None:
        watcher = make_watcher(project, notifier, runner, manifest_save_debounce_ms=50)
        for _ in range(3):
            watcher.on_document_saved(str(project / "pubspec.yaml"))
            await asyncio.sleep(0.01)
        await watcher.wait()
        assert runner.subcommands == ["get"]

    async def test_disabled(
        self, project: Path, notifier: RecordingNotifier, runner: FakeRunner
    ) -> None:
        watcher = make_watcher(project, notifier, runner, auto_resync_on_manifest_save=False)
        assert not watcher.on_document_saved(project / "pubspec.yaml")
        assert runner.calls == []

    async def test_dispose_cancels_pending(
        self, project: Path, notifier: RecordingNotifier, runner: FakeRunner
    ) -> None:
        watcher = make_watcher(project, notifier, runner, manifest_save_debounce_ms=1000)
        watcher.on_document_saved(project / "pubspec.yaml")
        watcher.dispose()
        assert not watcher.pending
        await asyncio.sleep(0.02)
        assert runner.calls == []

    async def test_failed_resync_is_reported_once(
        self, project: Path, notifier: RecordingNotifier
    ) -> None:
        runner = FakeRunner({"get": ProcessResult(1, "", "pubspec.yaml is invalid")})
        watcher = make_watcher(project, notifier, runner)
        watcher.on_document_saved(project / "pubspec.yaml")
        await watcher.wait()
        assert notifier.errors == ["Failed to run pub get: pubspec.yaml is invalid"]
