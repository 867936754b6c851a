"""Quick-fix suggestions for an identifier selected in the editor.

Code actions are passive: every "nothing to offer" outcome, including a
failed registry search, returns an empty list instead of notifying.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from pubsuggest.errors import PubSuggestError
from pubsuggest.models.editor import QuickFix
from pubsuggest.models.package import PACKAGE_NAME_RE

if TYPE_CHECKING:
    from pubsuggest.manifest import ManifestReader
    from pubsuggest.registry import RegistryClient

log = structlog.get_logger()


async def provide_quick_fixes(
    selected_text: str,
    project_root: Path | str | None,
    registry: RegistryClient,
    manifest_reader: ManifestReader,
    *,
    enable_suggestions: bool = True,
) -> list[QuickFix]:
    word = selected_text.strip()
    if not PACKAGE_NAME_RE.match(word):
        return []
    if not manifest_reader.exists(project_root):
        return []
    if manifest_reader.read(project_root).contains(word):
        return []
    if not enable_suggestions:
        return []

    try:
        hits = await registry.search(word)
    except PubSuggestError as exc:
        log.warning("quick_fix_search_failed", word=word, error=exc.message)
        return []

    return [
        QuickFix(title=f"Add '{hit.name}' to {manifest_reader.manifest_file}", package=hit.name)
        for hit in hits
    ]
