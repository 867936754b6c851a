from __future__ import annotations

from pubsuggest.models.editor import Position, QuickFix, Range, TextEdit
from pubsuggest.models.package import (
    NO_DESCRIPTION,
    PACKAGE_NAME_RE,
    ManifestState,
    PackageDetails,
    PackageRecord,
    SearchHit,
)
from pubsuggest.models.session import ImportOutcome, SessionPhase, SessionState, ViewMode

__all__ = [
    # package
    "NO_DESCRIPTION",
    "PACKAGE_NAME_RE",
    "ManifestState",
    "PackageDetails",
    "PackageRecord",
    "SearchHit",
    # editor
    "Position",
    "Range",
    "TextEdit",
    "QuickFix",
    # session
    "ViewMode",
    "SessionPhase",
    "SessionState",
    "ImportOutcome",
]
