"""
Application endpoints: submission, listing, stage transitions, scores,
invitations and bulk actions.

Transition rules live in app.services.transitions; domain errors raised there
propagate and are rendered by the PipelineError handler in main.py.
"""

import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_hr_user
from app.core.exceptions import ValidationError
from app.crud import application as application_crud
from app.crud import job as job_crud
from app.schemas.application import (
    ApplicationCreate,
    ApplicationSubmitResponse,
    ApplicationListItem,
    ApplicationResponse,
    AdvanceRequest,
    RejectRequest,
    StatusUpdateRequest,
    TransitionResponse,
    ScoreRecordRequest,
    ScoreRecordResponse,
    InviteResponse,
    ReanalyzeResponse,
)
from app.schemas.bulk import BulkActionRequest
from app.schemas.user import CurrentUser
from app.services import notifications, transitions
from app.services.bulk_operations import apply_bulk_action
from app.services.reanalysis import reanalyze_application
from app.services.stages import ApplicationStatus, Stage
from app.tasks import scoring_tasks

router = APIRouter(tags=["Applications"])
logger = logging.getLogger(__name__)


def _get_application_or_404(db: Session, application_id: UUID):
    application = application_crud.get_by_id(db, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


@router.post("/jobs/{job_id}/apply", status_code=201, response_model=ApplicationSubmitResponse)
def submit_application(
    job_id: UUID,
    request: ApplicationCreate,
    db: Session = Depends(get_db)
):
    """
    Public endpoint: a candidate applies to an active job.

    The application starts at resume_screening with status pending. When
    resume text is present, AI screening is queued to Celery; its score can
    auto-advance the application. The candidate gets an "Application
    Received" email; a failed delivery does not fail the submission.
    """
    job = job_crud.get_by_id(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if not job.is_accepting_applications:
        raise ValidationError("This job is not accepting applications")

    application = application_crud.create(db, job, request)
    logger.info(f"New application {application.id} for job {job_id}")

    screening_queued = False
    if application.resume_text:
        try:
            # auto_advance=True: the match score counts as the resume_screening score
            scoring_tasks.reanalyze_application_task.delay(str(application.id), True)
            screening_queued = True
            logger.info(f"Queued AI screening for application {application.id}")
        except Exception as e:
            logger.error(f"Failed to queue screening for application {application.id}: {e}")

    notifications.send(notifications.APPLICATION_RECEIVED, application, job)

    return ApplicationSubmitResponse(
        application_id=application.id,
        job_id=job.id,
        status=application.status,
        current_stage=application.current_stage,
        screening_queued=screening_queued,
        message="Application submitted successfully",
    )


@router.get("/applications", response_model=list[ApplicationListItem])
def list_applications(
    job_id: Optional[UUID] = None,
    status: Optional[ApplicationStatus] = None,
    stage: Optional[Stage] = None,
    min_score: Optional[float] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    List applications, newest first.

    Args:
        job_id: Only applications for this job
        status: Filter by status
        stage: Filter by current stage
        min_score: Minimum overall score
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100, max: 100)
    """
    if limit > 100:
        limit = 100

    return application_crud.get_multi(
        db, job_id=job_id, status=status, stage=stage, min_score=min_score, skip=skip, limit=limit
    )


@router.post("/applications/bulk")
def bulk_action(
    request: BulkActionRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Apply one action to many applications.

    Supported actions: update_status, advance_stage, reject, send_email,
    send_test_invite, send_interview_invite. Each application is processed
    and committed on its own; per-application failures are reported in
    ``results`` and do not stop the run.
    """
    summary = apply_bulk_action(
        db,
        request.action,
        request.application_ids,
        request.data,
        actor=current_user.display,
    )
    return summary.to_response()


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    return _get_application_or_404(db, application_id)


@router.post("/applications/{application_id}/advance", response_model=TransitionResponse)
def advance_application(
    application_id: UUID,
    request: Optional[AdvanceRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Move to the next enabled stage, or to ``target_stage`` when given.
    """
    application = _get_application_or_404(db, application_id)
    request = request or AdvanceRequest()

    result = transitions.advance(
        db,
        application,
        request.target_stage,
        actor=current_user.display,
        score=request.score,
        notes=request.notes,
    )
    return TransitionResponse(**vars(result))


@router.post("/applications/{application_id}/reject", response_model=TransitionResponse)
def reject_application(
    application_id: UUID,
    request: Optional[RejectRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Reject an application, optionally emailing the candidate.

    A failed email does not undo the rejection; it is reported in
    ``notify_succeeded``/``notify_error``.
    """
    application = _get_application_or_404(db, application_id)
    request = request or RejectRequest()

    result = transitions.reject(db, application, actor=current_user.display, reason=request.rejection_reason)
    response = TransitionResponse(**vars(result))

    if request.send_rejection_email and result.changed:
        sent = notifications.send(
            notifications.rejection_template(request.rejection_reason),
            application,
            application.job,
            extra={"reason": request.rejection_reason},
        )
        response.notify_succeeded = sent.sent
        response.notify_error = sent.error

    return response


@router.patch("/applications/{application_id}/status", response_model=TransitionResponse)
def update_application_status(
    application_id: UUID,
    request: StatusUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    application = _get_application_or_404(db, application_id)
    result = transitions.update_status(db, application, request.status, actor=current_user.display)
    return TransitionResponse(**vars(result))


@router.post("/applications/{application_id}/scores", response_model=ScoreRecordResponse)
def record_score(
    application_id: UUID,
    request: ScoreRecordRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Record a stage score (e.g. MCQ test or async interview result).

    Recomputes the overall score and auto-advances when the application is
    at that stage and the score reaches the stage's threshold.
    """
    application = _get_application_or_404(db, application_id)
    result = transitions.record_stage_score(
        db, application, request.stage, request.score, actor=current_user.display
    )
    return ScoreRecordResponse(**vars(result))


@router.post("/applications/{application_id}/reanalyze", response_model=ReanalyzeResponse)
async def reanalyze(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Re-run the AI resume match for one application and return the new score.

    The AI call failing after retries is reported as 502.
    """
    application = _get_application_or_404(db, application_id)
    result = await reanalyze_application(db, application)
    return ReanalyzeResponse(**result)


@router.post("/applications/{application_id}/invites/{kind}", response_model=InviteResponse)
def send_invite(
    application_id: UUID,
    kind: transitions.InviteKind,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Issue the candidate's test or interview link and email it.

    Each application gets at most one token per kind; a second invitation is
    409. Use the resend endpoint to email the same link again.
    """
    application = _get_application_or_404(db, application_id)
    result = transitions.send_stage_invite(db, application, kind)

    return InviteResponse(
        application_id=result.application_id,
        kind=result.kind.value,
        link=result.link,
        notify_succeeded=result.notify_succeeded,
        notify_error=result.notify_error,
    )


@router.post("/applications/{application_id}/invites/{kind}/resend", response_model=InviteResponse)
def resend_invite(
    application_id: UUID,
    kind: transitions.InviteKind,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    application = _get_application_or_404(db, application_id)
    result = transitions.resend_stage_invite(db, application, kind)

    return InviteResponse(
        application_id=result.application_id,
        kind=result.kind.value,
        link=result.link,
        notify_succeeded=result.notify_succeeded,
        notify_error=result.notify_error,
    )
