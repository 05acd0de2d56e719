"""Data models for categorization results."""

from __future__ import annotations

from dataclasses import dataclass

from src.pipeline_config import Department


@dataclass(frozen=True)
class CategorizedItem:
    """An action item paired with the department it was routed to."""

    task: str
    department: Department

    def to_dict(self) -> dict[str, str]:
        return {"task": self.task, "department": self.department.value}
