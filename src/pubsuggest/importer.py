"""Idempotent insertion and removal of canonical import lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pubsuggest.errors import ErrorCode, PubSuggestError
from pubsuggest.models.editor import Position, Range, TextEdit
from pubsuggest.models.package import PACKAGE_NAME_RE
from pubsuggest.models.session import ImportOutcome
from pubsuggest.scanner import canonical_import, has_import_line

if TYPE_CHECKING:
    from pubsuggest.editor import Document, Notifier

log = structlog.get_logger()


class ImportEditor:
    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    def _fail(
        self, message: str, code: ErrorCode = ErrorCode.EDIT_REJECTED, recoverable: bool = True
    ) -> PubSuggestError:
        self._notifier.error(message)
        return PubSuggestError(code, message, recoverable=recoverable)

    def _check_name(self, package_name: str) -> None:
        if not PACKAGE_NAME_RE.match(package_name):
            raise self._fail(
                f"Invalid package name: {package_name!r}", ErrorCode.INVALID_INPUT, recoverable=False
            )

    async def ensure_imported(
        self, package_name: str, document: Document, selection_range: Range
    ) -> ImportOutcome:
        """Remove the triggering selection and make sure the import line exists.

        Deletion and insertion go out as one batch; if the document rejects
        it, nothing has changed and ``EDIT_REJECTED`` is raised.
        """
        self._check_name(package_name)
        line = canonical_import(package_name)
        edits: list[TextEdit] = []
        if not selection_range.is_empty:
            edits.append(TextEdit.delete(selection_range))

        if has_import_line(document.get_text(), package_name):
            outcome = ImportOutcome.ALREADY_IMPORTED
        else:
            edits.append(TextEdit.insert(Position(line=0, character=0), line + "\n"))
            outcome = ImportOutcome.IMPORTED

        if edits and not await document.apply_edits(edits):
            log.warning("import_edit_rejected", package=package_name, uri=document.uri)
            raise self._fail(f"Could not update {document.uri} with the import for '{package_name}'")

        if outcome is ImportOutcome.ALREADY_IMPORTED:
            self._notifier.info(f"'{package_name}' is already imported")
        else:
            self._notifier.info(f"Imported '{package_name}'")
        log.info("import_ensured", package=package_name, outcome=str(outcome))
        return outcome

    async def remove_import(self, package_name: str, document: Document) -> bool:
        """Delete every canonical import line for the package. Returns False if none."""
        self._check_name(package_name)
        target = canonical_import(package_name)
        text = document.get_text()
        lines = text.split("\n")

        edits = []
        for index, content in enumerate(lines):
            if content.strip() != target:
                continue
            if index + 1 < len(lines):
                edits.append(TextEdit.delete(Range.of(index, 0, index + 1, 0)))
            else:
                edits.append(TextEdit.delete(Range.of(index, 0, index, len(content))))

        if not edits:
            return False
        if not await document.apply_edits(edits):
            raise self._fail(f"Could not remove the import for '{package_name}' from {document.uri}")
        log.info("import_removed", package=package_name, lines=len(edits))
        return True
