"""Transient per-request pipeline models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.categorization.models import CategorizedItem
from src.tracker.models import TrackerResult


class ItemStage(str, Enum):
    """Lifecycle of one action item within a single webhook delivery."""

    NEW = "new"
    DEDUPED = "deduped"
    CATEGORIZED = "categorized"
    TRACKER_CREATED = "tracker_created"
    TRACKER_FAILED = "tracker_failed"
    RECORDED = "recorded"
    DISCARDED = "discarded"


@dataclass
class PipelineItem:
    raw_text: str
    fingerprint: str
    stage: ItemStage = ItemStage.NEW


@dataclass(frozen=True)
class SkippedItem:
    task: str
    reason: str
    external_task_id: str | None = None
    processed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"task": self.task, "reason": self.reason}
        if self.external_task_id is not None:
            data["externalTaskId"] = self.external_task_id
        if self.processed_at is not None:
            data["processedAt"] = self.processed_at.isoformat()
        return data


@dataclass
class PipelineOutcome:
    """Everything the webhook response reports about one delivery."""

    meeting_name: str
    total_items: int
    items: list[PipelineItem]
    skipped_items: list[SkippedItem]
    categorized_items: list[CategorizedItem] = field(default_factory=list)
    tracker_results: list[TrackerResult] = field(default_factory=list)

    @property
    def new_items(self) -> int:
        return sum(1 for item in self.items if item.stage is not ItemStage.DEDUPED)

    @property
    def recorded_items(self) -> list[str]:
        return [item.raw_text for item in self.items if item.stage is ItemStage.RECORDED]

    @property
    def message(self) -> str:
        if self.new_items == 0:
            return "All items have already been processed"
        return "Webhook processed successfully"
