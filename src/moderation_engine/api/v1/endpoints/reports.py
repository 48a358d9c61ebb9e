"""Report submission and triage endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from moderation_engine.api.v1.dependencies import TriageDep
from moderation_engine.models.enums import Actor
from moderation_engine.schemas.report import (
    ContentReportCount,
    QueuedReportResponse,
    ReportCreate,
    ReportDecision,
    ReportDecisionResponse,
    ReportResponse,
    TriageOutcomeResponse,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def submit_report(payload: ReportCreate, triage: TriageDep) -> ReportResponse:
    """File a report; duplicate reports by the same user are rejected."""
    report = triage.submit_report(
        payload.content_type,
        payload.content_id,
        payload.reason,
        payload.description,
        payload.reporter_id,
    )
    return ReportResponse.model_validate(report)


@router.get("/pending", response_model=list[QueuedReportResponse])
def get_pending_reports(triage: TriageDep) -> list[QueuedReportResponse]:
    """Get the review queue, most urgent first."""
    return [QueuedReportResponse.model_validate(item) for item in triage.get_pending_reports()]


@router.get("/by-reporter/{reporter_id}", response_model=list[ReportResponse])
def get_user_reports(reporter_id: str, triage: TriageDep) -> list[ReportResponse]:
    return [ReportResponse.model_validate(r) for r in triage.get_user_reports(reporter_id)]


@router.get("/count/{content_type}/{content_id}", response_model=ContentReportCount)
def get_content_report_count(
    content_type: str,
    content_id: str,
    triage: TriageDep,
) -> ContentReportCount:
    count = triage.get_content_report_count(content_type, content_id)
    return ContentReportCount(content_type=content_type, content_id=content_id, count=count)


@router.post("/{report_id}/auto-process", response_model=TriageOutcomeResponse)
def auto_process_report(report_id: int, triage: TriageDep) -> TriageOutcomeResponse:
    """Apply the automatic decision table to a pending report."""
    return TriageOutcomeResponse.model_validate(triage.auto_process_report(report_id))


@router.post("/{report_id}/decision", response_model=ReportDecisionResponse)
def process_report(
    report_id: int,
    payload: ReportDecision,
    triage: TriageDep,
) -> ReportDecisionResponse:
    """Approve (and delete the content) or reject a pending report.

    ``processed`` is False when the report had already been decided.
    """
    processed = triage.process_report(
        report_id,
        payload.action,
        admin_note=payload.admin_note,
        actor=Actor.admin(payload.admin_id),
    )
    return ReportDecisionResponse(report_id=report_id, processed=processed)
