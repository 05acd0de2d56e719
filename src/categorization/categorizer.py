"""Claude-powered department categorization of action items."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import anthropic
from anthropic import Anthropic

from src.config import Settings
from src.errors import AIServiceError
from src.pipeline_config import Department

logger = logging.getLogger(__name__)


class Categorizer(Protocol):
    """Order-preserving batch categorization collaborator.

    Implementations return raw JSON-like data: a list with one
    ``{"task": str, "department": str}`` mapping per input, in input order.
    The pipeline validates the shape before trusting it.
    """

    name: str

    async def categorize(self, tasks: list[str]) -> Any: ...


# Tool definition for Claude structured output
CATEGORIZATION_TOOL: dict[str, Any] = {
    "name": "store_categorized_items",
    "description": (
        "Store the department chosen for each action item. "
        "Call this once with every item, in the order they were given."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                "description": "One entry per action item, in input order.",
                "items": {
                    "type": "object",
                    "properties": {
                        "task": {
                            "type": "string",
                            "description": "The action item text, copied verbatim.",
                        },
                        "department": {
                            "type": "string",
                            "enum": [d.value for d in Department],
                            "description": "Department responsible for the task.",
                        },
                    },
                    "required": ["task", "department"],
                },
            },
        },
        "required": ["items"],
    },
}

SYSTEM_PROMPT = (
    "You route meeting action items to the department that owns them.\n\n"
    "Departments:\n"
    "- **Design**: labels, packaging, branding, artwork and visual work.\n"
    "- **Procurement**: costing, pricing, suppliers, purchasing and commercial terms.\n"
    "- **Production**: formulation, manufacturing, quality and operations.\n\n"
    "Use the store_categorized_items tool. Return exactly one entry per action "
    "item, in the same order, and copy each task text verbatim."
)


class ClaudeCategorizer:
    """Categorizer backed by a single forced tool call to Claude."""

    name = "claude"

    def __init__(self, api_key: str, model: str, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> ClaudeCategorizer:
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            timeout=settings.categorizer_timeout_seconds,
        )

    async def categorize(self, tasks: list[str]) -> list[Any]:
        # Synchronous SDK runs in a thread so the event loop keeps serving requests.
        return await asyncio.to_thread(self._categorize_sync, tasks)

    def _categorize_sync(self, tasks: list[str]) -> list[Any]:
        client = Anthropic(api_key=self.api_key, timeout=self.timeout)
        listing = "\n".join(f"- {task}" for task in tasks)

        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=4096,
                system=SYSTEM_PROMPT,
                tools=[CATEGORIZATION_TOOL],
                tool_choice={"type": "tool", "name": "store_categorized_items"},
                messages=[
                    {
                        "role": "user",
                        "content": f"Categorize these action items:\n\n{listing}",
                    }
                ],
            )
        except anthropic.AuthenticationError as exc:
            raise AIServiceError("Invalid or missing Anthropic API key") from exc
        except anthropic.RateLimitError as exc:
            raise AIServiceError("AI service quota exceeded or rate limit reached") from exc
        except anthropic.APIConnectionError as exc:
            # APITimeoutError is a subclass
            raise AIServiceError("Network error connecting to AI service") from exc
        except anthropic.APIError as exc:
            raise AIServiceError(f"AI categorization failed: {exc}") from exc

        return _parse_tool_response(response)


def _parse_tool_response(response: Any) -> list[Any]:
    """Pull the raw ``items`` list out of the Claude tool_use response."""
    for block in response.content:
        if block.type != "tool_use":
            continue
        if block.name != "store_categorized_items":
            continue

        data = block.input
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise AIServiceError("AI response is not valid JSON") from exc

        if not isinstance(data, dict) or "items" not in data:
            raise AIServiceError("AI response is missing the 'items' field")
        return data["items"]

    raise AIServiceError("AI response did not include categorized items")
