"""FastAPI endpoints for the Firefly AI Categorizer.

This module defines the ingestion routes (Firefly III webhook, manual tag-poll trigger), job inspection routes and
the health check. Ingestion endpoints only validate and enqueue; classification happens on the work queue.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from categorizer.api.dependencies import get_poller, get_registry, get_runner
from categorizer.core.exceptions import WebhookValidationError
from categorizer.core.models import Job, JobCreated
from categorizer.core.utils import get_logger
from categorizer.services.ingestion import parse_webhook
from categorizer.workers.job_registry import JobRegistry
from categorizer.workers.job_runner import JobRunner
from categorizer.workers.tag_poller import TagPoller

router = APIRouter()
logger = get_logger("firefly-categorizer.api")


@router.post(
    "/webhook",
    status_code=202,
    response_model=JobCreated,
    summary="Receive a Firefly III STORE_TRANSACTION webhook",
    description=(
        "Validate a Firefly III webhook delivery and queue the transaction for classification.\n\n"
        "**Response:**\n"
        "- 202 Accepted: `{ 'job_id': '<uuid>' }` once the job is queued.\n"
        "- 400 Bad Request: the delivery is not a withdrawal/deposit STORE_TRANSACTION with a description and "
        "destination."
    ),
    responses={
        202: {
            "description": "Job queued.",
            "content": {"application/json": {"example": {"job_id": "123e4567-e89b-12d3-a456-426614174000"}}},
        },
        400: {
            "description": "Invalid webhook delivery.",
            "content": {"application/json": {"example": {"detail": "Missing content.transactions[0].description"}}},
        },
    },
)
async def webhook(payload: Any = Body(...), runner: JobRunner = Depends(get_runner)) -> JSONResponse:
    """Queue the transaction carried by a webhook delivery."""
    logger.info("Webhook triggered")
    logger.debug(f"Webhook body: {payload}")
    try:
        group = parse_webhook(payload)
    except WebhookValidationError as exc:
        logger.warning(f"Rejected webhook: {exc}")
        raise HTTPException(400, str(exc)) from exc
    job, _ = runner.enqueue(group)
    return JSONResponse({"job_id": job.id}, status_code=202)


@router.post(
    "/tag-poll",
    status_code=202,
    summary="Run one tag-poll cycle now",
    description=(
        "Reprocess the most recent transactions carrying the configured tag filter. The cycle runs in the "
        "background.\n\n"
        "**Response:**\n"
        "- 202 Accepted: the cycle was started.\n"
        "- 400 Bad Request: no tag filter is configured."
    ),
)
async def tag_poll(background_tasks: BackgroundTasks, poller: TagPoller = Depends(get_poller)) -> JSONResponse:
    """Trigger a tag-poll cycle."""
    if not poller.enabled:
        raise HTTPException(400, "FIREFLY_TAG_FILTER is not configured")
    background_tasks.add_task(poller.run_cycle)
    return JSONResponse({"status": "started"}, status_code=202)


@router.get("/jobs", response_model=list[Job], summary="List classification jobs")
async def list_jobs(registry: JobRegistry = Depends(get_registry)) -> list[Job]:
    """List every job, oldest first."""
    return registry.list_jobs()


@router.get(
    "/jobs/{job_id}",
    response_model=Job,
    summary="Get a classification job",
    responses={
        404: {
            "description": "Job not found.",
            "content": {"application/json": {"example": {"detail": "Job not found"}}},
        },
    },
)
async def get_job(job_id: str, registry: JobRegistry = Depends(get_registry)) -> Job:
    """Get the state and payload of a job."""
    job = registry.get(job_id)
    if not job:
        raise HTTPException(404, "Job not found")
    return job


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
