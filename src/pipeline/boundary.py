"""Validation of raw collaborator output before it enters the pipeline.

Collaborators hand back JSON-like data.  These functions are the only place it
is inspected; everything downstream works with CategorizedItem / TrackerResult.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from src.categorization.models import CategorizedItem
from src.errors import AIServiceError, TrackerServiceError
from src.pipeline_config import DEFAULT_DEPARTMENT, Department
from src.tracker.models import TrackerResult
from src.validation.validator import clean_text

logger = logging.getLogger(__name__)


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def validate_categorized(raw: Any, inputs: Sequence[str]) -> list[CategorizedItem]:
    """Check the categorizer response against the ordered ``inputs``.

    Unknown departments are remapped to the default department, and a task
    whose text drifted from its input is replaced by the input text.

    Raises:
        AIServiceError: the response is not a list of matching length, or an
            entry lacks a string ``task`` / ``department``.
    """
    if not _is_list(raw):
        raise AIServiceError(
            "Invalid AI response format",
            details="AI service returned unexpected data structure",
        )
    if len(raw) != len(inputs):
        raise AIServiceError(
            "Invalid AI response format",
            details=f"AI response length ({len(raw)}) does not match input length ({len(inputs)})",
        )

    items: list[CategorizedItem] = []
    for i, (entry, original) in enumerate(zip(raw, inputs)):
        if not isinstance(entry, Mapping):
            raise AIServiceError(
                "Invalid AI response format", details=f"Item at index {i} is not an object"
            )
        task = entry.get("task")
        department = entry.get("department")
        if not isinstance(task, str) or not task:
            raise AIServiceError(
                "Invalid AI response format",
                details=f"Item at index {i} missing valid 'task' field",
            )
        if not isinstance(department, str) or not department:
            raise AIServiceError(
                "Invalid AI response format",
                details=f"Item at index {i} missing valid 'department' field",
            )

        try:
            resolved = Department(department)
        except ValueError:
            logger.warning(
                "Invalid department %r for task %r, defaulting to %r",
                department,
                task,
                DEFAULT_DEPARTMENT.value,
            )
            resolved = DEFAULT_DEPARTMENT

        if clean_text(task) != clean_text(original):
            logger.warning(
                "Task mismatch at index %d: original %r vs AI response %r", i, original, task
            )

        # Echoed text may differ cosmetically; the input text is canonical downstream
        items.append(CategorizedItem(task=original, department=resolved))
    return items


def validate_tracker_results(raw: Any, items: Sequence[CategorizedItem]) -> list[TrackerResult]:
    """Check the tracker response against the ordered categorized ``items``.

    Raises:
        TrackerServiceError: the response is not a list of matching length, or
            an entry lacks a boolean ``success`` / string ``task``.
    """
    if not _is_list(raw):
        raise TrackerServiceError(
            "Invalid tracker response format",
            details="Tracker service returned unexpected data structure",
        )
    if len(raw) != len(items):
        raise TrackerServiceError(
            "Invalid tracker response format",
            details=(
                f"Tracker response length ({len(raw)}) does not match input length ({len(items)})"
            ),
        )

    results: list[TrackerResult] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            raise TrackerServiceError(
                "Invalid tracker response format", details=f"Result at index {i} is not an object"
            )
        success = entry.get("success")
        task = entry.get("task")
        if not isinstance(success, bool) or not isinstance(task, str):
            raise TrackerServiceError(
                "Invalid tracker response format",
                details=f"Result at index {i} missing 'success' or 'task'",
            )

        task_id = entry.get("taskId")
        if task_id is not None and not isinstance(task_id, (str, int)):
            raise TrackerServiceError(
                "Invalid tracker response format",
                details=f"Result at index {i} has invalid 'taskId'",
            )
        error = entry.get("error")
        department = entry.get("department")

        results.append(
            TrackerResult(
                success=success,
                task=task,
                department=department if isinstance(department, str) else None,
                task_id=None if task_id in (None, "") else str(task_id),
                error=None if error is None else str(error),
            )
        )
    return results
