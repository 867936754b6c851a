"""Application state: the wired set of components for one project."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from pubsuggest.catalog import PackageCatalogBuilder
from pubsuggest.config import Settings
from pubsuggest.importer import ImportEditor
from pubsuggest.manifest import ManifestReader
from pubsuggest.mutation import MutationExecutor
from pubsuggest.registry import RegistryClient, build_http_client
from pubsuggest.watcher import ManifestSaveWatcher

if TYPE_CHECKING:
    from pubsuggest.editor import Notifier
    from pubsuggest.mutation import ProcessRunner


@dataclass
class AppState:
    settings: Settings
    project_root: Path | None
    notifier: Notifier
    http_client: httpx.AsyncClient
    registry: RegistryClient
    manifest_reader: ManifestReader
    builder: PackageCatalogBuilder
    executor: MutationExecutor
    import_editor: ImportEditor
    watcher: ManifestSaveWatcher


def build_state(
    settings: Settings,
    project_root: Path | str | None,
    notifier: Notifier,
    http_client: httpx.AsyncClient,
    runner: ProcessRunner | None = None,
) -> AppState:
    """Wire every component. The caller owns ``http_client``."""
    root = Path(project_root) if project_root is not None else None
    registry = RegistryClient(http_client, settings.registry)
    manifest_reader = ManifestReader(settings.package_manager.manifest_file)
    executor = MutationExecutor(settings.package_manager, root, notifier, runner)
    return AppState(
        settings=settings,
        project_root=root,
        notifier=notifier,
        http_client=http_client,
        registry=registry,
        manifest_reader=manifest_reader,
        builder=PackageCatalogBuilder(
            manifest_reader,
            registry,
            root,
            strict_imports=settings.suggestions.strict_imports,
            enable_registry=settings.suggestions.enable_suggestions,
        ),
        executor=executor,
        import_editor=ImportEditor(notifier),
        watcher=ManifestSaveWatcher(executor, settings),
    )


@asynccontextmanager
async def open_state(
    settings: Settings,
    project_root: Path | str | None,
    notifier: Notifier,
    runner: ProcessRunner | None = None,
) -> AsyncIterator[AppState]:
    """Build an AppState with its own HTTP client; closes it on exit."""
    async with build_http_client(settings.registry) as client:
        state = build_state(settings, project_root, notifier, client, runner)
        try:
            yield state
        finally:
            state.watcher.dispose()
