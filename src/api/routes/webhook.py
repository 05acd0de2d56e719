"""Webhook endpoint: turn meeting action items into tracked tasks."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from src.api.models import WebhookResponse
from src.pipeline.factory import get_pipeline
from src.pipeline.orchestrator import WebhookPipeline
from src.validation.validator import validate_request

router = APIRouter()


@router.post("/webhook", response_model=WebhookResponse, response_model_exclude_none=True)
async def webhook(
    body: Annotated[Any, Body()],
    pipeline: Annotated[WebhookPipeline, Depends(get_pipeline)],
) -> WebhookResponse:
    """Process a meeting's action items.

    Items already processed by an earlier delivery are reported in
    ``skippedItems`` and never sent to a collaborator again, so retrying the
    same payload is always safe.  Validation runs before any side effect.
    Errors are rendered by the handlers registered in ``src.api.main``.
    """
    request = validate_request(body)
    outcome = await pipeline.process(request)
    return WebhookResponse.from_outcome(outcome)
