"""Read-only views over the local task tracker."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.models import LocalTasksResponse, LocalTaskStatsResponse
from src.pipeline.factory import get_pipeline
from src.pipeline.orchestrator import WebhookPipeline
from src.tracker.local import LocalTaskTracker

router = APIRouter()


def _local_tracker(pipeline: WebhookPipeline) -> LocalTaskTracker:
    # Graceful degradation: tasks live in Zoho when the local tracker is not in use
    if not isinstance(pipeline.tracker, LocalTaskTracker):
        raise HTTPException(
            status_code=501,
            detail="Local task views are only available when TRACKER_BACKEND=local.",
        )
    return pipeline.tracker


@router.get("/api/tasks", response_model=LocalTasksResponse)
async def list_tasks(
    pipeline: Annotated[WebhookPipeline, Depends(get_pipeline)],
    department: Annotated[str | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
) -> LocalTasksResponse:
    """List locally tracked tasks, optionally filtered by department and status."""
    tasks = _local_tracker(pipeline).list_tasks(department=department, status=status)
    return LocalTasksResponse(tasks=tasks, total=len(tasks))


@router.get("/api/tasks/stats", response_model=LocalTaskStatsResponse)
async def task_stats(
    pipeline: Annotated[WebhookPipeline, Depends(get_pipeline)],
) -> LocalTaskStatsResponse:
    return LocalTaskStatsResponse(statistics=_local_tracker(pipeline).statistics())
