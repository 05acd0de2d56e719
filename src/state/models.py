"""Persisted processing records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values and ``Z`` as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ProcessingRecord:
    """Proof that an action item was turned into an external task."""

    task: str
    department: str
    meeting_name: str
    external_task_id: str | None
    processed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "department": self.department,
            "meetingName": self.meeting_name,
            "externalTaskId": self.external_task_id,
            "processedAt": self.processed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProcessingRecord:
        """Build a record from its JSON form.

        Documents written before the tracker was made pluggable store the id
        under ``zohoTaskId``; it is read as ``externalTaskId``.

        Raises:
            KeyError, TypeError, ValueError: the entry is malformed.
        """
        external_id = data.get("externalTaskId", data.get("zohoTaskId"))
        return cls(
            task=str(data["task"]),
            department=str(data.get("department", "")),
            meeting_name=str(data.get("meetingName", "")),
            external_task_id=None if external_id is None else str(external_id),
            processed_at=parse_timestamp(data["processedAt"]),
        )
