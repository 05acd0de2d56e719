"""Idempotent webhook pipeline: dedup -> categorize -> track -> record."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import Any

from src.categorization.categorizer import Categorizer
from src.errors import (
    AIServiceError,
    CollaboratorError,
    DataIntegrityError,
    StateError,
    TrackerServiceError,
)
from src.pipeline.boundary import validate_categorized, validate_tracker_results
from src.pipeline.models import ItemStage, PipelineItem, PipelineOutcome, SkippedItem
from src.state.models import ProcessingRecord
from src.state.store import StateStore
from src.tracker.models import Tracker
from src.validation.models import WebhookRequest
from src.validation.validator import clean_text

logger = logging.getLogger(__name__)

ALREADY_PROCESSED = "Already processed"


def fingerprint(task: str) -> str:
    """SHA-256 hex digest of the cleaned task text, used as the dedup key."""
    return hashlib.sha256(clean_text(task).encode("utf-8")).hexdigest()


class WebhookPipeline:
    """Turns a validated webhook into external tasks at most once per action item.

    A ProcessingRecord is written only after the tracker confirmed creation.
    A crash between those two steps means the item is created again on the
    next delivery; there is no intent record covering that window.
    """

    def __init__(self, store: StateStore, categorizer: Categorizer, tracker: Tracker) -> None:
        self.store = store
        self.categorizer = categorizer
        self.tracker = tracker

    async def process(self, request: WebhookRequest) -> PipelineOutcome:
        logger.info("Processing webhook for meeting: %s", request.meeting_name)
        logger.info("Action items: %s", ", ".join(request.action_items))

        # 1. Dedup against persisted state
        state = await self.store.load()
        items = [
            PipelineItem(raw_text=text, fingerprint=fingerprint(text))
            for text in request.action_items
        ]
        skipped: list[SkippedItem] = []
        for item in items:
            record = state.get(item.fingerprint)
            if record is not None:
                item.stage = ItemStage.DEDUPED
                skipped.append(
                    SkippedItem(
                        task=item.raw_text,
                        reason=ALREADY_PROCESSED,
                        external_task_id=record.external_task_id,
                        processed_at=record.processed_at,
                    )
                )

        outcome = PipelineOutcome(
            meeting_name=request.meeting_name,
            total_items=len(items),
            items=items,
            skipped_items=skipped,
        )
        new_items = [item for item in items if item.stage is ItemStage.NEW]

        # 2. Nothing new: no collaborator calls
        if not new_items:
            logger.info("All %d items already processed", len(items))
            return outcome

        try:
            # 3. Categorize
            texts = [item.raw_text for item in new_items]
            categorized = validate_categorized(
                await self._call(self.categorizer.categorize(texts), AIServiceError, "AI"),
                texts,
            )
            for item in new_items:
                item.stage = ItemStage.CATEGORIZED
            outcome.categorized_items = categorized

            # 4. Create tasks
            results = validate_tracker_results(
                await self._call(
                    self.tracker.create_tasks(categorized), TrackerServiceError, "Tracker"
                ),
                categorized,
            )
            outcome.tracker_results = results
        except CollaboratorError as exc:
            exc.skipped_items = [s.to_dict() for s in skipped]
            raise

        # 5-6. Identity check and commit, isolated per item
        for i, (item, cat, result) in enumerate(zip(new_items, categorized, results)):
            if not item.raw_text == cat.task == result.task:
                error = DataIntegrityError(i, item.raw_text, cat.task, result.task)
                logger.error("Data integrity error, skipping commit: %s", error)
                item.stage = ItemStage.DISCARDED
                continue

            if not result.success:
                item.stage = ItemStage.TRACKER_FAILED
                logger.warning("Tracker failed for %r: %s", item.raw_text, result.error)
                continue

            item.stage = ItemStage.TRACKER_CREATED
            record = ProcessingRecord(
                task=item.raw_text,
                department=cat.department.value,
                meeting_name=request.meeting_name,
                external_task_id=result.task_id,
                processed_at=datetime.now(timezone.utc),
            )
            try:
                await self.store.put(item.fingerprint, record)
            except StateError:
                logger.exception("Failed to mark task as processed: %r", item.raw_text)
                continue
            item.stage = ItemStage.RECORDED

        logger.info(
            "Meeting %s: %d new, %d skipped, %d recorded",
            request.meeting_name,
            len(new_items),
            len(skipped),
            len(outcome.recorded_items),
        )
        return outcome

    @staticmethod
    async def _call(
        awaitable: Awaitable[Any], error_cls: type[CollaboratorError], label: str
    ) -> Any:
        """Await a collaborator call, mapping unexpected failures to ``error_cls``.

        The call is shielded: if the request is cancelled the external call
        still runs to completion or to its own timeout.
        """
        try:
            return await asyncio.shield(awaitable)
        except CollaboratorError:
            raise
        except Exception as exc:
            logger.exception("%s collaborator call failed", label)
            raise error_cls(f"{label} service unavailable", details=str(exc)) from exc
