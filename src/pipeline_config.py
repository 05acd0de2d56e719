"""Pipeline configuration: department and backend enums, PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.config import Settings


class Department(str, Enum):
    """Departments an action item can be routed to."""

    DESIGN = "Design"
    PROCUREMENT = "Procurement"
    PRODUCTION = "Production"


# Unrecognized departments from the categorizer are remapped here.
DEFAULT_DEPARTMENT = Department.PRODUCTION


class CategorizerBackend(str, Enum):
    """Available categorization collaborators."""

    CLAUDE = "claude"
    KEYWORDS = "keywords"


class TrackerBackend(str, Enum):
    """Available task-tracker collaborators."""

    ZOHO = "zoho"
    LOCAL = "local"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for the state store and its lock.

    Defaults mirror the project's current behaviour (30-day retention,
    10 s lock timeout, 30 s staleness threshold).
    """

    state_file: Path = Path("state.json")
    lock_file: Path = Path("state.lock")
    state_ttl_days: int = 30
    max_state_size_mb: float = 10.0
    lock_timeout_seconds: float = 10.0
    lock_stale_seconds: float = 30.0
    lock_poll_interval_seconds: float = 0.1
    categorizer_backend: CategorizerBackend = CategorizerBackend.CLAUDE
    tracker_backend: TrackerBackend = TrackerBackend.ZOHO

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            state_file=Path(settings.state_file),
            lock_file=Path(settings.lock_file),
            state_ttl_days=settings.state_ttl_days,
            max_state_size_mb=settings.max_state_size_mb,
            lock_timeout_seconds=settings.lock_timeout_seconds,
            lock_stale_seconds=settings.lock_stale_seconds,
            lock_poll_interval_seconds=settings.lock_poll_interval_seconds,
            categorizer_backend=CategorizerBackend(settings.categorizer_backend),
            tracker_backend=TrackerBackend(settings.tracker_backend),
        )
