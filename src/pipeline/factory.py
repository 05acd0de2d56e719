"""Build the webhook pipeline and its collaborators from settings."""

from __future__ import annotations

from functools import lru_cache

from src.categorization.categorizer import Categorizer, ClaudeCategorizer
from src.categorization.keywords import KeywordCategorizer
from src.config import Settings, get_settings
from src.pipeline.orchestrator import WebhookPipeline
from src.pipeline_config import CategorizerBackend, PipelineConfig, TrackerBackend
from src.state.lock import LockManager
from src.state.store import StateStore
from src.tracker.local import LocalTaskTracker
from src.tracker.models import Tracker
from src.tracker.zoho import ZohoSprintsTracker


def build_store(config: PipelineConfig) -> StateStore:
    lock = LockManager(
        config.lock_file,
        timeout=config.lock_timeout_seconds,
        stale_after=config.lock_stale_seconds,
        poll_interval=config.lock_poll_interval_seconds,
    )
    return StateStore(
        config.state_file,
        lock,
        ttl_days=config.state_ttl_days,
        max_size_mb=config.max_state_size_mb,
    )


def build_categorizer(backend: CategorizerBackend, settings: Settings) -> Categorizer:
    if backend is CategorizerBackend.KEYWORDS:
        return KeywordCategorizer()
    return ClaudeCategorizer.from_settings(settings)


def build_tracker(backend: TrackerBackend, settings: Settings) -> Tracker:
    if backend is TrackerBackend.LOCAL:
        return LocalTaskTracker.from_settings(settings)
    return ZohoSprintsTracker.from_settings(settings)


def build_pipeline(settings: Settings) -> WebhookPipeline:
    config = PipelineConfig.from_settings(settings)
    return WebhookPipeline(
        store=build_store(config),
        categorizer=build_categorizer(config.categorizer_backend, settings),
        tracker=build_tracker(config.tracker_backend, settings),
    )


@lru_cache(maxsize=1)
def get_pipeline() -> WebhookPipeline:
    """Return the process-wide pipeline (FastAPI dependency)."""
    return build_pipeline(get_settings())
