import logging
import os
import platform
import time
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, HealthResponse
from src.api.routes.tasks import router as tasks_router
from src.api.routes.webhook import router as webhook_router
from src.config import settings
from src.errors import AutomationError, CollaboratorError, ValidationError
from src.pipeline.factory import get_pipeline
from src.pipeline.orchestrator import WebhookPipeline

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

app = FastAPI(
    title="Action Item Automation API",
    description="Idempotent meeting action item categorization and task creation",
    version="0.1.0",
)

app.include_router(webhook_router)
app.include_router(tasks_router)


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@app.exception_handler(AutomationError)
async def automation_error_handler(request: Request, exc: AutomationError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        return _error_response(
            exc.http_status,
            ErrorResponse(message=exc.public_message, details=exc.message, field=exc.field),
        )

    logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    if exc.details is not None:
        body = ErrorResponse(message=exc.message, details=exc.details)
    else:
        body = ErrorResponse(message=exc.public_message, details=exc.message)
    if isinstance(exc, CollaboratorError):
        # Dedup results computed before the failure are still accurate
        body.skipped_items = exc.skipped_items
    return _error_response(exc.http_status, body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed JSON or a missing body never reaches the validator
    return _error_response(
        400,
        ErrorResponse(message="Invalid request data", details="Request body must be valid JSON"),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Error processing %s", request.url.path)
    return _error_response(500, ErrorResponse(message="Internal server error", details=str(exc)))


def optional_pipeline() -> WebhookPipeline | None:
    """Build the pipeline for diagnostics, or None if its configuration is invalid."""
    try:
        return get_pipeline()
    except ValueError as exc:
        logger.warning("Pipeline unavailable: %s", exc)
        return None


@app.get("/health", response_model=HealthResponse)
async def health(
    pipeline: Annotated[WebhookPipeline | None, Depends(optional_pipeline)],
) -> HealthResponse:
    # Liveness does not require a valid backend configuration
    return HealthResponse(
        uptime_seconds=round(time.monotonic() - STARTED_AT, 3),
        python_version=platform.python_version(),
        pid=os.getpid(),
        categorizer=pipeline.categorizer.name if pipeline else None,
        tracker=pipeline.tracker.name if pipeline else None,
    )
