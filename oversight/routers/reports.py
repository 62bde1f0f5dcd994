"""Compliance report job endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from oversight.config import ScoringPolicy
from oversight.dependencies import get_policy
from oversight.schemas.common import ApiResponse
from oversight.schemas.report import ReportCreate, ReportJob
from oversight.services.report_jobs import create_report_job, retry_report_job, run_report_job
from oversight.store import data_store

logger = structlog.get_logger()

router = APIRouter(prefix="/api/grc/reports", tags=["reports"])


@router.post("", status_code=202, response_model=ApiResponse[ReportJob])
async def create_report(
    body: ReportCreate,
    response: Response,
    background_tasks: BackgroundTasks,
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[ReportJob]:
    """Queue a compliance report.

    Repeating an idempotency key returns the existing job with 200 and
    does not start another run.
    """
    report, created = create_report_job(data_store, body.entity_id, body.framework_id, body.idempotency_key)
    if created:
        background_tasks.add_task(run_report_job, data_store, report["id"], policy)
        logger.info("report_queued", report_id=report["id"], entity_id=body.entity_id)
        message = "Report generation started"
    else:
        response.status_code = 200
        message = "Report already requested with this idempotency key"
    return ApiResponse(message=message, data=ReportJob.model_validate(report))


@router.get("/{report_id}", response_model=ApiResponse[ReportJob])
async def get_report(report_id: str) -> ApiResponse[ReportJob]:
    return ApiResponse(data=ReportJob.model_validate(data_store.get_report(report_id)))


@router.post("/{report_id}/retry", status_code=202, response_model=ApiResponse[ReportJob])
async def retry_report(
    report_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[ReportJob]:
    """Retry a failed report. Only failed jobs can be retried."""
    max_attempts = request.app.state.settings.report_max_attempts
    report = retry_report_job(data_store, report_id, max_attempts)
    background_tasks.add_task(run_report_job, data_store, report_id, policy)
    logger.info("report_retry_queued", report_id=report_id, attempts=report["attempts"])
    return ApiResponse(message="Report generation restarted", data=ReportJob.model_validate(report))
