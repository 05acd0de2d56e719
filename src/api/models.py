"""Pydantic response schemas for the webhook API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.pipeline.models import PipelineOutcome


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SkippedItemResponse(CamelModel):
    """An action item that was already processed by an earlier delivery."""

    task: str
    reason: str
    external_task_id: str | None = None
    processed_at: datetime | None = None


class CategorizedItemResponse(CamelModel):
    task: str
    department: str


class TrackerResultResponse(CamelModel):
    success: bool
    task: str
    department: str | None = None
    task_id: str | None = None
    error: str | None = None


class WebhookResponse(CamelModel):
    """Response body for POST /webhook."""

    success: bool = True
    timestamp: datetime = Field(default_factory=utc_now)
    message: str
    meeting_name: str
    total_items: int
    new_items: int
    skipped_items: list[SkippedItemResponse] = []
    categorized_items: list[CategorizedItemResponse] = []
    tracker_results: list[TrackerResultResponse] = []
    recorded_items: list[str] = []

    @classmethod
    def from_outcome(cls, outcome: PipelineOutcome) -> WebhookResponse:
        return cls(
            message=outcome.message,
            meeting_name=outcome.meeting_name,
            total_items=outcome.total_items,
            new_items=outcome.new_items,
            skipped_items=[
                SkippedItemResponse(
                    task=s.task,
                    reason=s.reason,
                    external_task_id=s.external_task_id,
                    processed_at=s.processed_at,
                )
                for s in outcome.skipped_items
            ],
            categorized_items=[
                CategorizedItemResponse(task=c.task, department=c.department.value)
                for c in outcome.categorized_items
            ],
            tracker_results=[
                TrackerResultResponse(
                    success=r.success,
                    task=r.task,
                    department=r.department,
                    task_id=r.task_id,
                    error=r.error,
                )
                for r in outcome.tracker_results
            ],
            recorded_items=outcome.recorded_items,
        )


class ErrorResponse(CamelModel):
    """Structured body for every non-2xx response."""

    error: bool = True
    message: str
    details: Any = None
    field: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    skipped_items: list[dict[str, Any]] | None = None


class HealthResponse(CamelModel):
    success: bool = True
    timestamp: datetime = Field(default_factory=utc_now)
    status: str = "OK"
    uptime_seconds: float
    python_version: str
    pid: int
    categorizer: str | None = None
    tracker: str | None = None


class LocalTasksResponse(CamelModel):
    success: bool = True
    tasks: list[dict[str, Any]]
    total: int


class LocalTaskStatsResponse(CamelModel):
    success: bool = True
    statistics: dict[str, Any]
