"""Exception taxonomy for the webhook pipeline.

Every error that can reach the HTTP layer derives from ``AutomationError`` and
carries the status code it is rendered with.  ``DataIntegrityError`` never
reaches a caller: the orchestrator logs it and skips the affected item.
"""

from __future__ import annotations

from typing import Any


class AutomationError(Exception):
    """Base class for errors rendered as structured JSON responses."""

    http_status = 500
    public_message = "Internal server error"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------


class ValidationError(AutomationError):
    """The inbound request is malformed.  Raised before any side effect."""

    http_status = 400
    public_message = "Invalid request data"

    def __init__(self, message: str, *, field: str | None = None, kind: str = "invalid") -> None:
        super().__init__(message)
        self.field = field
        self.kind = kind


# ---------------------------------------------------------------------------
# State errors
# ---------------------------------------------------------------------------


class StateError(AutomationError):
    """Infrastructure failure around the persisted state."""


class LockTimeout(StateError):
    http_status = 503
    public_message = "State store busy"


class StateIOError(StateError):
    http_status = 500
    public_message = "State storage error"


class StatePermissionError(StateIOError):
    pass


class StateDiskFullError(StateIOError):
    pass


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------


class CollaboratorError(AutomationError):
    """An external collaborator failed; the current batch of new items is aborted.

    ``skipped_items`` is filled in by the orchestrator so the error response
    still reports the items that were deduplicated before the failure.
    """

    http_status = 503

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message, details=details)
        self.skipped_items: list[dict[str, Any]] = []


class AIServiceError(CollaboratorError):
    public_message = "AI service unavailable"


class TrackerServiceError(CollaboratorError):
    public_message = "Tracker service unavailable"


# ---------------------------------------------------------------------------
# Internal
# ---------------------------------------------------------------------------


class DataIntegrityError(Exception):
    """Task text diverged between pipeline stages for a single item."""

    def __init__(self, index: int, expected: str, categorized: str, tracked: str) -> None:
        super().__init__(
            f"Task mismatch at index {index}: input {expected!r}, "
            f"categorized {categorized!r}, tracker {tracked!r}"
        )
        self.index = index
        self.expected = expected
        self.categorized = categorized
        self.tracked = tracked
