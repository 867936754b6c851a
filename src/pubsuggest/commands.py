"""Editor command entry points.

Each command checks its preconditions first; a failed precondition is
reported once through the notifier and raised, and nothing else runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pubsuggest.errors import ErrorCode, PubSuggestError
from pubsuggest.models.package import PACKAGE_NAME_RE
from pubsuggest.models.session import ViewMode
from pubsuggest.quickfix import provide_quick_fixes
from pubsuggest.session import SuggestionSession

if TYPE_CHECKING:
    from pubsuggest.editor import Document, SuggestionView
    from pubsuggest.models.editor import QuickFix, Range
    from pubsuggest.state import AppState

log = structlog.get_logger()

DART_LANGUAGE_ID = "dart"


def _reject(state: AppState, code: ErrorCode, message: str) -> PubSuggestError:
    state.notifier.info(message)
    return PubSuggestError(code, message)


def _dart_document(state: AppState, document: Document | None) -> Document:
    if document is None or document.language_id != DART_LANGUAGE_ID:
        raise _reject(state, ErrorCode.NO_ACTIVE_DOCUMENT, "No active Dart editor found.")
    return document


def selected_identifier(state: AppState, document: Document | None, selection: Range) -> str:
    """Return the selected word, or report why there is nothing to look up."""
    document = _dart_document(state, document)
    word = document.get_text_in(selection).strip()
    if not word:
        raise _reject(
            state, ErrorCode.INVALID_INPUT, "Please select a word to check for packages."
        )
    if not PACKAGE_NAME_RE.match(word):
        raise _reject(
            state,
            ErrorCode.INVALID_INPUT,
            "Please select a valid package name (letters, numbers or underscores).",
        )
    return word


def show_package_suggestions(
    state: AppState,
    document: Document | None,
    selection: Range,
    view: SuggestionView,
    *,
    mode: ViewMode = ViewMode.ALL,
) -> SuggestionSession:
    """Open a suggestion session seeded with the selected word and fetch at once."""
    document = _dart_document(state, document)
    word = selected_identifier(state, document, selection)

    session = SuggestionSession(
        state.builder,
        state.executor,
        state.import_editor,
        document,
        view,
        state.notifier,
        debounce_seconds=state.settings.suggestions.debounce_seconds,
        mode=mode,
        query=word,
        origin=selection,
    )
    log.info("session_opened", query=word, mode=str(mode), uri=document.uri)
    session.refresh()
    return session


async def quick_fixes(state: AppState, document: Document, selection: Range) -> list[QuickFix]:
    if document.language_id != DART_LANGUAGE_ID:
        return []
    return await provide_quick_fixes(
        document.get_text_in(selection),
        state.project_root,
        state.registry,
        state.manifest_reader,
        enable_suggestions=state.settings.suggestions.enable_suggestions,
    )


async def apply_quick_fix(state: AppState, fix: QuickFix) -> None:
    await state.executor.add_package(fix.package)
