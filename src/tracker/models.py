"""Tracker collaborator protocol and result model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from src.categorization.models import CategorizedItem
from src.pipeline_config import Department

# Priority/assignee used when creating tasks, per department
DEPARTMENT_PRIORITY: dict[Department, str] = {
    Department.DESIGN: "High",
    Department.PROCUREMENT: "Medium",
    Department.PRODUCTION: "High",
}
DEFAULT_PRIORITY = "Medium"


class Tracker(Protocol):
    """Order-preserving batch task-creation collaborator.

    Implementations return raw JSON-like data: one
    ``{"success": bool, "task": str, "taskId"?: str, "error"?: str}`` mapping
    per input, in input order.  Per-task failures are reported in-band; an
    exception means the whole batch failed.
    """

    name: str

    async def create_tasks(self, items: list[CategorizedItem]) -> Any: ...


@dataclass(frozen=True)
class TrackerResult:
    """Validated outcome of creating one external task.

    ``success`` is the tag: a successful result carries ``task_id`` (when the
    tracker reported one), a failed result carries ``error``.
    """

    success: bool
    task: str
    department: str | None = None
    task_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "task": self.task}
        if self.department is not None:
            data["department"] = self.department
        if self.task_id is not None:
            data["taskId"] = self.task_id
        if self.error is not None:
            data["error"] = self.error
        return data
