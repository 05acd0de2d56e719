"""Zoho Sprints task creation over the REST API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from src.categorization.models import CategorizedItem
from src.config import Settings
from src.errors import TrackerServiceError
from src.tracker.models import DEFAULT_PRIORITY, DEPARTMENT_PRIORITY
from src.validation.validator import clean_text

logger = logging.getLogger(__name__)

MIN_TASK_LENGTH = 3
MAX_TASK_LENGTH = 200

_STATUS_MESSAGES = {
    401: "Zoho authentication failed - invalid or expired token",
    403: "Zoho authorization failed - insufficient permissions",
    404: "Zoho resource not found - check team/project/sprint IDs",
    429: "Zoho rate limit exceeded - please try again later",
    500: "Zoho internal server error",
    502: "Zoho service temporarily unavailable",
    503: "Zoho service temporarily unavailable",
    504: "Zoho service temporarily unavailable",
}


def describe_http_error(exc: httpx.HTTPError) -> str:
    """Turn an httpx error into a human-readable failure reason."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return _STATUS_MESSAGES.get(
            status, f"Zoho API error ({status}): {exc.response.reason_phrase}"
        )
    if isinstance(exc, httpx.TimeoutException):
        return "Zoho request timeout - service may be slow or unavailable"
    if isinstance(exc, httpx.TransportError):
        return "Network error connecting to Zoho service"
    return f"Zoho task creation failed: {exc}"


class ZohoSprintsTracker:
    """Creates one sprint item per action item, sequentially."""

    name = "zoho"

    def __init__(
        self,
        bearer_token: str,
        team_id: str,
        project_id: str,
        sprint_id: str,
        base_url: str = "https://api.zohosprints.com/zsapi",
        timeout: float = 30.0,
        request_delay: float = 0.1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.bearer_token = bearer_token
        self.team_id = team_id
        self.project_id = project_id
        self.sprint_id = sprint_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.request_delay = request_delay
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> ZohoSprintsTracker:
        return cls(
            bearer_token=settings.zoho_bearer_token,
            team_id=settings.zoho_team_id,
            project_id=settings.zoho_project_id,
            sprint_id=settings.zoho_sprint_id,
            base_url=settings.zoho_base_url,
            timeout=settings.tracker_timeout_seconds,
            request_delay=settings.tracker_request_delay_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return all((self.bearer_token, self.team_id, self.project_id, self.sprint_id))

    @property
    def items_url(self) -> str:
        return (
            f"{self.base_url}/team/{self.team_id}/projects/{self.project_id}"
            f"/sprints/{self.sprint_id}/item/"
        )

    async def create_tasks(self, items: list[CategorizedItem]) -> list[dict[str, Any]]:
        if not self.is_configured:
            raise TrackerServiceError(
                "Zoho configuration is incomplete. Please check environment variables."
            )

        results: list[dict[str, Any]] = []
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.bearer_token}"},
            transport=self._transport,
        ) as client:
            for i, item in enumerate(items):
                if i:
                    # Sequential with a small gap to stay under Zoho's rate limits
                    await asyncio.sleep(self.request_delay)
                results.append(await self._create_task(client, item))
        return results

    async def _create_task(
        self, client: httpx.AsyncClient, item: CategorizedItem
    ) -> dict[str, Any]:
        department = item.department.value
        task = clean_text(item.task)
        if not MIN_TASK_LENGTH <= len(task) <= MAX_TASK_LENGTH:
            return {
                "success": False,
                "task": item.task,
                "department": department,
                "error": (
                    f"Task must be between {MIN_TASK_LENGTH} and "
                    f"{MAX_TASK_LENGTH} characters for Zoho Sprints"
                ),
            }

        payload = {
            "name": task,
            "description": f"Automated task from meeting action items. Department: {department}",
            "priority": DEPARTMENT_PRIORITY.get(item.department, DEFAULT_PRIORITY),
            "assignee": None,
            "status": "To Do",
        }

        try:
            response = await client.post(self.items_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            reason = describe_http_error(exc)
            logger.error("Error creating task in Zoho Sprints %r: %s", task, reason)
            return {"success": False, "task": item.task, "department": department, "error": reason}
        except ValueError:
            logger.error("Zoho returned a non-JSON body for task %r", task)
            return {
                "success": False,
                "task": item.task,
                "department": department,
                "error": "Zoho returned an unreadable response",
            }

        task_id = None
        if isinstance(body, dict):
            task_id = body.get("id") or body.get("itemId") or body.get("taskId")
        if not task_id:
            logger.warning("No task ID found in Zoho response for %r: %s", task, body)
            task_id = None
        elif isinstance(task_id, (dict, list)):
            logger.warning("Unusable task ID in Zoho response for %r: %r", task, task_id)
            task_id = None
        else:
            task_id = str(task_id)

        logger.info("Task created in Zoho Sprints: %s", task)
        return {"success": True, "task": task, "department": department, "taskId": task_id}
