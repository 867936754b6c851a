"""Interactive suggestion session.

One instance per open suggestion list. The session owns its debounce timer
and a generation counter: every fetch takes a new generation number, and a
result is rendered only if the session is still open and no newer fetch has
started since. Superseded fetches are not aborted, their results are simply
dropped, so the rendered list never regresses to older data.

All public methods must be called from the event loop thread.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from pubsuggest.errors import PubSuggestError
from pubsuggest.models.editor import Range
from pubsuggest.models.package import PackageRecord
from pubsuggest.models.session import SessionPhase, SessionState, ViewMode

if TYPE_CHECKING:
    from pubsuggest.catalog import PackageCatalogBuilder
    from pubsuggest.editor import Document, Notifier, SuggestionView
    from pubsuggest.importer import ImportEditor
    from pubsuggest.mutation import MutationExecutor

log = structlog.get_logger()

EMPTY_MESSAGES = {
    ViewMode.ALL: "No packages found",
    ViewMode.INSTALLED_ONLY: "No installed packages match",
}


class SuggestionSession:
    def __init__(
        self,
        builder: PackageCatalogBuilder,
        executor: MutationExecutor,
        import_editor: ImportEditor,
        document: Document,
        view: SuggestionView,
        notifier: Notifier,
        *,
        debounce_seconds: float = 0.5,
        mode: ViewMode = ViewMode.ALL,
        query: str = "",
        origin: Range | None = None,
    ) -> None:
        self._builder = builder
        self._executor = executor
        self._import_editor = import_editor
        self._document = document
        self._view = view
        self._notifier = notifier
        self._debounce_seconds = debounce_seconds
        self._origin = origin  # Selection the session was opened from

        self.state = SessionState(query=query, mode=mode)
        self.rendered: list[PackageRecord] = []

        self._debounce_task: asyncio.Task[None] | None = None
        self._fetch_tasks: set[asyncio.Task[None]] = set()
        self._mutating: set[str] = set()  # record keys with a mutation in flight

    @property
    def closed(self) -> bool:
        return self.state.phase is SessionPhase.CLOSED

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def on_text_changed(self, text: str) -> None:
        if self.closed:
            return
        self.state.query = text
        self._schedule()

    def on_toggle(self) -> None:
        if self.closed:
            return
        self.state.mode = self.state.mode.toggled()
        log.debug("session_mode_toggled", mode=str(self.state.mode))
        self._schedule()

    def refresh(self) -> asyncio.Task[None] | None:
        """Fetch immediately with the current query and mode, skipping the debounce."""
        if self.closed:
            return None
        self._cancel_debounce()
        return self._start_fetch()

    async def on_item_selected(
        self, record: PackageRecord, selection_range: Range | None = None
    ) -> bool:
        """Import the package, installing it first if needed.

        The import is only attempted after a successful install. The text
        in ``selection_range`` (default: the range the session was opened
        from) is removed as part of the import edit. Returns True when the
        import line is in place at the end.
        """
        if self.closed or not self._claim(record):
            return False

        self._view.clear_input()
        self._view.hide()
        try:
            if not record.is_installed:
                await self._executor.add_package(record.name)
            await self._import_editor.ensure_imported(
                record.name, self._document, self._take_origin(selection_range)
            )
        except PubSuggestError as exc:
            # Already reported by the executor or import editor.
            log.info("session_selection_failed", package=record.name, code=str(exc.code))
            return False
        finally:
            self._release(record)
        return True

    async def on_item_action(self, record: PackageRecord) -> bool:
        """Install or remove the package without touching imports.

        The list is re-queried afterwards either way so it shows the
        manifest's real state.
        """
        if self.closed or not self._claim(record):
            return False

        try:
            if record.is_installed:
                await self._executor.remove_package(record.name)
            else:
                await self._executor.add_package(record.name)
        except PubSuggestError as exc:
            log.info("session_action_failed", package=record.name, code=str(exc.code))
            return False
        finally:
            self._release(record)
            self.refresh()
        return True

    def close(self) -> None:
        if self.closed:
            return
        self._cancel_debounce()
        self.state.phase = SessionPhase.CLOSED
        log.debug("session_closed", generation=self.state.generation)

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or fetch is outstanding."""
        while True:
            pending = list(self._fetch_tasks)
            if self._debounce_task is not None:
                pending.append(self._debounce_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _schedule(self) -> None:
        self.state.phase = SessionPhase.QUERY_PENDING
        self._cancel_debounce()
        self._debounce_task = asyncio.create_task(self._debounce())

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    async def _debounce(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._debounce_task = None
        if not self.closed:
            self._start_fetch()

    def _start_fetch(self) -> asyncio.Task[None]:
        self.state.generation += 1
        self.state.phase = SessionPhase.FETCHING
        self._view.show_loading()

        task = asyncio.create_task(
            self._fetch(self.state.generation, self.state.query, self.state.mode)
        )
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)
        return task

    def _is_current(self, generation: int) -> bool:
        return not self.closed and generation == self.state.generation

    async def _fetch(self, generation: int, query: str, mode: ViewMode) -> None:
        log.debug("session_fetch_start", generation=generation, query=query, mode=str(mode))
        try:
            records = await self._builder.build(query, self._document.get_text(), mode)
        except PubSuggestError as exc:
            if self._is_current(generation):
                # The previously rendered list stays visible.
                self.state.phase = SessionPhase.RENDERED
                self._view.show_error(exc.message)
                self._notifier.error(exc.message)
            return
        except Exception:
            log.exception("session_fetch_crashed", generation=generation)
            if self._is_current(generation):
                self.state.phase = SessionPhase.RENDERED
                self._view.show_error("Failed to load packages")
                self._notifier.error("Failed to load packages")
            return

        if not self._is_current(generation):
            log.debug(
                "session_stale_result_dropped",
                generation=generation,
                current=self.state.generation,
                closed=self.closed,
            )
            return

        if self.state.phase is SessionPhase.FETCHING:
            self.state.phase = SessionPhase.RENDERED
        self._render(records, mode)

    def _render(self, records: Sequence[PackageRecord], mode: ViewMode) -> None:
        self.rendered = list(records)
        if self.rendered:
            self._view.show_items(self.rendered)
        else:
            self._view.show_empty(EMPTY_MESSAGES[mode])

    # ------------------------------------------------------------------
    # Mutation bookkeeping
    # ------------------------------------------------------------------

    def _claim(self, record: PackageRecord) -> bool:
        if record.key in self._mutating:
            self._notifier.error(f"A change to '{record.name}' is already in progress")
            return False
        self._mutating.add(record.key)
        return True

    def _release(self, record: PackageRecord) -> None:
        self._mutating.discard(record.key)

    def _take_origin(self, selection_range: Range | None) -> Range:
        if selection_range is not None:
            return selection_range
        # The original selection is consumed by the first import edit.
        origin, self._origin = self._origin, None
        return origin if origin is not None else Range.empty()
