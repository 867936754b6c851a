"""Debounced resync after the manifest is saved by hand."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from pubsuggest.errors import PubSuggestError

if TYPE_CHECKING:
    from pubsuggest.config import Settings
    from pubsuggest.mutation import MutationExecutor

log = structlog.get_logger()


class ManifestSaveWatcher:
    def __init__(self, executor: MutationExecutor, settings: Settings) -> None:
        self._executor = executor
        self._manifest_file = settings.package_manager.manifest_file
        self._enabled = settings.suggestions.auto_resync_on_manifest_save
        self._delay = settings.suggestions.manifest_save_debounce_seconds
        self._pending: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def on_document_saved(self, path: Path | str) -> bool:
        """Restart the resync timer if ``path`` is the manifest. Returns True if scheduled."""
        if Path(path).name != self._manifest_file or not self._enabled:
            return False
        self.dispose()
        self._pending = asyncio.create_task(self._resync_later())
        return True

    async def _resync_later(self) -> None:
        await asyncio.sleep(self._delay)
        try:
            await self._executor.resync()
        except PubSuggestError as exc:
            # The executor has already notified the user.
            log.info("manifest_resync_failed", code=str(exc.code))

    async def wait(self) -> None:
        if self._pending is not None:
            await asyncio.gather(self._pending, return_exceptions=True)

    def dispose(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
