from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ViewMode(StrEnum):
    INSTALLED_ONLY = "installed-only"
    ALL = "all"

    def toggled(self) -> ViewMode:
        return ViewMode.ALL if self is ViewMode.INSTALLED_ONLY else ViewMode.INSTALLED_ONLY


class SessionPhase(StrEnum):
    IDLE = "idle"
    QUERY_PENDING = "query-pending"
    FETCHING = "fetching"
    RENDERED = "rendered"
    CLOSED = "closed"


class ImportOutcome(StrEnum):
    IMPORTED = "imported"
    ALREADY_IMPORTED = "already-imported"


class SessionState(BaseModel):
    """Ephemeral state owned by a single SuggestionSession."""

    query: str = ""
    mode: ViewMode = ViewMode.ALL
    generation: int = 0  # Bumped on every fetch; stale results carry an older value
    phase: SessionPhase = SessionPhase.IDLE
