"""Editor-facing protocols and the in-memory document used by the CLI host.

The engine never touches files for the active document: it reads text
through ``Document`` and hands back ``TextEdit`` batches, which the host
applies atomically.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import structlog

from pubsuggest.models.editor import Position, Range, TextEdit
from pubsuggest.models.package import PackageRecord

log = structlog.get_logger()


@runtime_checkable
class Document(Protocol):
    @property
    def uri(self) -> str: ...

    @property
    def language_id(self) -> str: ...

    def get_text(self) -> str: ...

    def get_text_in(self, range: Range) -> str: ...

    async def apply_edits(self, edits: Sequence[TextEdit]) -> bool:
        """Apply all edits or none. Returns False if the batch was rejected."""
        ...


class SuggestionView(Protocol):
    def show_loading(self) -> None: ...

    def show_items(self, records: Sequence[PackageRecord]) -> None: ...

    def show_empty(self, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def clear_input(self) -> None: ...

    def hide(self) -> None: ...


class Notifier(Protocol):
    """User-visible notifications. One call per reportable outcome."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def progress(self, message: str) -> None: ...


class InMemoryDocument:
    """A ``Document`` backed by a string.

    Edits in one batch are resolved against the same snapshot and applied
    from the end of the text backwards, so earlier edits never shift later
    ones. Out-of-range or overlapping edits reject the whole batch.
    """

    def __init__(self, text: str = "", uri: str = "untitled:document", language_id: str = "dart") -> None:
        self._text = text
        self._uri = uri
        self._language_id = language_id

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def language_id(self) -> str:
        return self._language_id

    def get_text(self) -> str:
        return self._text

    def get_text_in(self, range: Range) -> str:
        start = self._offset(range.start)
        end = self._offset(range.end)
        if start is None or end is None:
            raise ValueError(f"range outside document: {range}")
        return self._text[start:end]

    def _line_starts(self) -> list[int]:
        starts = [0]
        for index, char in enumerate(self._text):
            if char == "\n":
                starts.append(index + 1)
        return starts

    def _offset(self, position: Position, starts: list[int] | None = None) -> int | None:
        starts = starts if starts is not None else self._line_starts()
        if position.line >= len(starts):
            return None
        line_start = starts[position.line]
        if position.line + 1 < len(starts):
            line_end = starts[position.line + 1] - 1
        else:
            line_end = len(self._text)
        if position.character > line_end - line_start:
            return None
        return line_start + position.character

    async def apply_edits(self, edits: Sequence[TextEdit]) -> bool:
        starts = self._line_starts()
        resolved: list[tuple[int, int, str]] = []
        for edit in edits:
            start = self._offset(edit.range.start, starts)
            end = self._offset(edit.range.end, starts)
            if start is None or end is None:
                log.debug("document_edit_rejected", uri=self._uri, reason="out_of_range")
                return False
            resolved.append((start, end, edit.new_text))

        resolved.sort(key=lambda item: (item[0], item[1]))
        for (_, prev_end, _), (next_start, _, _) in zip(resolved, resolved[1:]):
            if prev_end > next_start:
                log.debug("document_edit_rejected", uri=self._uri, reason="overlap")
                return False

        text = self._text
        for start, end, new_text in reversed(resolved):
            text = text[:start] + new_text + text[end:]
        self._text = text
        return True
