"""Error codes and the single exception type raised across component boundaries.

Data-source degradation (a failed detail fetch, a malformed manifest) is
handled inside the component that owns it and never becomes a
``PubSuggestError``. Everything else that the user must hear about does.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    NO_ACTIVE_DOCUMENT = "NO_ACTIVE_DOCUMENT"
    NO_PROJECT_ROOT = "NO_PROJECT_ROOT"
    REGISTRY_UNAVAILABLE = "REGISTRY_UNAVAILABLE"
    SUGGESTIONS_DISABLED = "SUGGESTIONS_DISABLED"
    MUTATION_FAILED = "MUTATION_FAILED"
    RESYNC_FAILED = "RESYNC_FAILED"
    MUTATION_IN_PROGRESS = "MUTATION_IN_PROGRESS"
    EDIT_REJECTED = "EDIT_REJECTED"


class PubSuggestError(Exception):
    """A user-visible failure.

    ``recoverable`` tells the caller whether retrying the same operation
    later can succeed (a registry outage) or not (a precondition failure).
    """

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable
