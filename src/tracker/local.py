"""Local JSON-file task tracker, used when no external tracker is configured."""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from src.categorization.models import CategorizedItem
from src.config import Settings
from src.state.models import parse_timestamp
from src.state.store import write_json_atomic
from src.tracker.models import DEFAULT_PRIORITY, DEPARTMENT_PRIORITY
from src.validation.validator import clean_text

logger = logging.getLogger(__name__)

MAX_TASK_LENGTH = 500
DUE_IN = timedelta(days=7)
RECENT_WINDOW = timedelta(days=7)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalTaskTracker:
    """Appends tasks to a JSON document: ``{"tasks": [...], "metadata": {...}}``."""

    name = "local"

    def __init__(self, tasks_file: Path | str, request_delay: float = 0.1) -> None:
        self.tasks_file = Path(tasks_file)
        self.request_delay = request_delay

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalTaskTracker:
        return cls(settings.local_tasks_file, settings.tracker_request_delay_seconds)

    def _load(self) -> dict[str, Any]:
        try:
            return json.loads(self.tasks_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            now = _now_iso()
            return {"tasks": [], "metadata": {"created": now, "lastUpdated": now, "totalTasks": 0}}

    def _save(self, data: dict[str, Any]) -> None:
        data["metadata"]["lastUpdated"] = _now_iso()
        data["metadata"]["totalTasks"] = len(data["tasks"])
        write_json_atomic(self.tasks_file, data)

    def create_task(self, item: CategorizedItem) -> dict[str, Any]:
        department = item.department.value
        task = clean_text(item.task)
        if not task or len(task) > MAX_TASK_LENGTH:
            return {
                "success": False,
                "task": item.task,
                "department": department,
                "error": f"Task must be 1-{MAX_TASK_LENGTH} characters",
            }

        now = datetime.now(timezone.utc)
        new_task = {
            "id": secrets.token_hex(16),
            "name": task,
            "description": f"Automated task from meeting action items. Department: {department}",
            "department": department,
            "priority": DEPARTMENT_PRIORITY.get(item.department, DEFAULT_PRIORITY),
            "assignee": f"{department} Team",
            "status": "To Do",
            "created": now.isoformat(),
            "updated": now.isoformat(),
            "dueDate": (now + DUE_IN).isoformat(),
            "source": "Action Item Automation",
        }

        data = self._load()
        data["tasks"].append(new_task)
        self._save(data)

        logger.info("Task created locally: %s (%s)", task, department)
        return {"success": True, "task": task, "department": department, "taskId": new_task["id"]}

    async def create_tasks(self, items: list[CategorizedItem]) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []
        for i, item in enumerate(items):
            if i:
                await asyncio.sleep(self.request_delay)
            try:
                results.append(self.create_task(item))
            except Exception as exc:
                logger.exception("Unexpected error creating local task %r", item.task)
                results.append(
                    {
                        "success": False,
                        "task": item.task,
                        "department": item.department.value,
                        "error": f"Unexpected error during task creation: {exc}",
                    }
                )
        return results

    def list_tasks(
        self, department: str | None = None, status: str | None = None
    ) -> list[dict[str, Any]]:
        tasks = self._load()["tasks"]
        if department:
            tasks = [t for t in tasks if t.get("department") == department]
        if status:
            tasks = [t for t in tasks if t.get("status") == status]
        return tasks

    def statistics(self) -> dict[str, Any]:
        """Task counts by department, status and priority, plus recent creations."""
        tasks = self._load()["tasks"]
        cutoff = datetime.now(timezone.utc) - RECENT_WINDOW
        recent = 0
        for task in tasks:
            try:
                if parse_timestamp(task["created"]) > cutoff:
                    recent += 1
            except (KeyError, TypeError, ValueError, AttributeError):
                continue
        return {
            "total": len(tasks),
            "byDepartment": dict(Counter(t.get("department") for t in tasks)),
            "byStatus": dict(Counter(t.get("status") for t in tasks)),
            "byPriority": dict(Counter(t.get("priority") for t in tasks)),
            "recentlyCreated": recent,
        }
