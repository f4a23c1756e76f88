"""
Transition engine: moves one application through the pipeline.

Every operation validates against the stage model, writes through the CRUD
layer (one commit per operation) and returns a small result object. Errors
are raised as app.core.exceptions types; single-candidate endpoints let them
propagate, the bulk processor records them per item.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AlreadyAtFinalStage,
    AlreadyInvited,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from app.core.security import generate_invite_token
from app.crud import application as application_crud
from app.models.application import Application
from app.schemas.pipeline import PipelineConfig
from app.services import notifications
from app.services.scoring import compute_overall_score, scores_from_application
from app.services.stages import (
    ApplicationStatus,
    Stage,
    check_transition,
    is_terminal,
    next_stage,
    status_for_stage,
)

logger = logging.getLogger(__name__)


class InviteKind(str, enum.Enum):
    TEST = "test"
    INTERVIEW = "interview"


INVITE_TEMPLATES = {
    InviteKind.TEST: notifications.TEST_INVITE,
    InviteKind.INTERVIEW: notifications.INTERVIEW_INVITE,
}

# Stage -> score column written when that stage is scored
STAGE_SCORE_FIELDS = {
    Stage.RESUME_SCREENING: "resume_match_score",
    Stage.MCQ_TEST: "mcq_score",
    Stage.ASYNC_INTERVIEW: "interview_score",
    Stage.LIVE_INTERVIEW: "live_interview_score",
}


@dataclass
class TransitionResult:
    application_id: object
    previous_stage: Stage
    new_stage: Stage
    status: ApplicationStatus
    changed: bool = True


@dataclass
class InviteResult:
    application_id: object
    kind: InviteKind
    token: str
    link: str
    notify_succeeded: bool
    notify_error: Optional[str] = None


@dataclass
class ScoreResult:
    application_id: object
    stage: Stage
    score: float
    overall_score: Optional[float]
    advanced: bool
    new_stage: Optional[Stage]
    message: str


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _record_history(
    application: Application,
    from_stage: Stage,
    to_stage: Stage,
    actor: Optional[str] = None,
    score: Optional[float] = None,
    notes: Optional[str] = None,
    auto_advanced: bool = False,
) -> None:
    entry = {
        "from": from_stage.value,
        "to": to_stage.value,
        "score": score,
        "notes": notes,
        "auto_advanced": auto_advanced,
        "actor": actor,
        "timestamp": _now().isoformat(),
    }
    # Reassign so the JSON column is marked dirty
    application.stage_history = [*(application.stage_history or []), entry]


def invite_link(kind: InviteKind, token: str) -> str:
    path = "test" if InviteKind(kind) == InviteKind.TEST else "interview"
    return f"{settings.APP_URL.rstrip('/')}/{path}/{token}"


def recompute_overall_score(application: Application) -> Optional[float]:
    """Refresh ``overall_score`` from the stage scores and the job's weights (no commit)."""
    config = PipelineConfig.for_job(application.job)
    application.overall_score = compute_overall_score(
        scores_from_application(application), config.scoring_weights
    )
    return application.overall_score


def advance(
    db: Session,
    application: Application,
    target_stage: Optional[Stage] = None,
    actor: Optional[str] = None,
    score: Optional[float] = None,
    notes: Optional[str] = None,
) -> TransitionResult:
    """
    Move an application to ``target_stage`` or, if omitted, to the next
    stage enabled in its job's pipeline.

    Raises:
        AlreadyAtFinalStage: No target given and nothing follows the current stage
        InvalidTransition: The move is not allowed by the stage model
    """
    current = Stage(application.current_stage)

    if target_stage is None:
        config = PipelineConfig.for_job(application.job)
        target = next_stage(current, config.enabled_stages())
    else:
        target = Stage(target_stage)

    if target == Stage.REJECTED:
        return reject(db, application, actor=actor, reason=notes)

    check_transition(current, target, settings.ALLOW_FAST_TRACK_HIRE)

    application.current_stage = target
    application.status = status_for_stage(target)
    _record_history(application, current, target, actor=actor, score=score, notes=notes)
    application_crud.save(db, application)

    logger.info(f"Application {application.id} advanced {current.value} -> {target.value}")
    return TransitionResult(
        application_id=application.id,
        previous_stage=current,
        new_stage=target,
        status=application.status,
    )


def reject(
    db: Session,
    application: Application,
    actor: Optional[str] = None,
    reason: Optional[str] = None,
) -> TransitionResult:
    """
    Reject an application. Rejecting an already-rejected application is a
    successful no-op.

    Raises:
        InvalidTransition: The candidate has already been hired
    """
    current = Stage(application.current_stage)

    if current == Stage.REJECTED:
        if application.status != ApplicationStatus.REJECTED:
            application.status = ApplicationStatus.REJECTED
            application_crud.save(db, application)
        return TransitionResult(
            application_id=application.id,
            previous_stage=current,
            new_stage=current,
            status=ApplicationStatus.REJECTED,
            changed=False,
        )

    check_transition(current, Stage.REJECTED, settings.ALLOW_FAST_TRACK_HIRE)

    application.current_stage = Stage.REJECTED
    application.status = ApplicationStatus.REJECTED
    _record_history(application, current, Stage.REJECTED, actor=actor, notes=reason)
    application_crud.save(db, application)

    logger.info(f"Application {application.id} rejected at {current.value}")
    return TransitionResult(
        application_id=application.id,
        previous_stage=current,
        new_stage=Stage.REJECTED,
        status=ApplicationStatus.REJECTED,
    )


def update_status(
    db: Session,
    application: Application,
    status: ApplicationStatus,
    actor: Optional[str] = None,
) -> TransitionResult:
    """
    Set the coarse status while keeping it consistent with the stage.

    ``rejected`` and ``hired`` move the stage as well; other statuses are
    refused on a finished (hired/rejected) application.
    """
    status = ApplicationStatus(status)
    current = Stage(application.current_stage)

    if status == ApplicationStatus.REJECTED:
        return reject(db, application, actor=actor)

    if status == ApplicationStatus.HIRED:
        if current == Stage.HIRED:
            return TransitionResult(application.id, current, current, ApplicationStatus.HIRED, changed=False)
        return advance(db, application, Stage.HIRED, actor=actor)

    if is_terminal(current):
        raise InvalidTransition(
            f"Cannot set status {status.value} on a {current.value} application"
        )

    changed = application.status != status
    application.status = status
    application_crud.save(db, application)

    return TransitionResult(
        application_id=application.id,
        previous_stage=current,
        new_stage=current,
        status=status,
        changed=changed,
    )


def send_stage_invite(
    db: Session,
    application: Application,
    kind: InviteKind,
) -> InviteResult:
    """
    Issue the candidate's test or interview token and email the link.

    The token is stored with a conditional update, so it is issued at most
    once per application and kind. Delivery problems are reported in the
    result; the token stays in place either way.

    Raises:
        AlreadyInvited: A token of this kind already exists
        InvalidTransition: The application is hired or rejected
    """
    kind = InviteKind(kind)
    token_field = application_crud.TOKEN_COLUMNS[kind.value]

    if getattr(application, token_field):
        raise AlreadyInvited(f"{kind.value.capitalize()} invitation already sent")

    if is_terminal(application.current_stage):
        raise InvalidTransition(
            f"Cannot invite a {Stage(application.current_stage).value} application"
        )

    token = generate_invite_token()
    if not application_crud.claim_token(db, application.id, kind.value, token):
        db.refresh(application)
        raise AlreadyInvited(f"{kind.value.capitalize()} invitation already sent")

    db.refresh(application)
    logger.info(f"Issued {kind.value} token for application {application.id}")

    link = invite_link(kind, token)
    notification = notifications.send(INVITE_TEMPLATES[kind], application, application.job, extra={"link": link})

    return InviteResult(
        application_id=application.id,
        kind=kind,
        token=token,
        link=link,
        notify_succeeded=notification.sent,
        notify_error=notification.error,
    )


def resend_stage_invite(db: Session, application: Application, kind: InviteKind) -> InviteResult:
    """
    Email the existing test/interview link again without issuing a new token.

    Raises:
        NotFound: No invitation of this kind has been issued
    """
    kind = InviteKind(kind)
    token = getattr(application, application_crud.TOKEN_COLUMNS[kind.value])
    if not token:
        raise NotFound(f"No {kind.value} invitation has been sent for this application")

    link = invite_link(kind, token)
    notification = notifications.send(INVITE_TEMPLATES[kind], application, application.job, extra={"link": link})

    return InviteResult(
        application_id=application.id,
        kind=kind,
        token=token,
        link=link,
        notify_succeeded=notification.sent,
        notify_error=notification.error,
    )


def record_stage_score(
    db: Session,
    application: Application,
    stage: Stage,
    score: float,
    actor: Optional[str] = None,
) -> ScoreResult:
    """
    Store a stage score, refresh the overall score and auto-advance.

    The application moves on when it currently sits at ``stage`` and the
    score reaches that stage's auto_advance_threshold. Auto-advance never
    lands on hired or rejected.

    Raises:
        ValidationError: The stage is not scored, or the score is outside 0-100
    """
    stage = Stage(stage)
    if stage not in STAGE_SCORE_FIELDS:
        raise ValidationError(f"Stage {stage.value} does not take a score")
    if score is None or not 0 <= score <= 100:
        raise ValidationError("Score must be between 0 and 100")

    setattr(application, STAGE_SCORE_FIELDS[stage], score)
    if stage == Stage.MCQ_TEST:
        application.test_completed_at = _now()
    elif stage == Stage.ASYNC_INTERVIEW:
        application.interview_completed_at = _now()

    overall = recompute_overall_score(application)

    config = PipelineConfig.for_job(application.job)
    threshold = config.threshold_for(stage)
    current = Stage(application.current_stage)
    new_stage = None

    if current != stage:
        message = f"Score recorded; application is at {current.value}, not {stage.value}"
    elif threshold is None:
        message = "Auto-advance not configured for this stage"
    elif score < threshold:
        message = f"Score {score} below threshold {threshold}"
    else:
        try:
            new_stage = next_stage(stage, config.enabled_stages())
        except AlreadyAtFinalStage:
            new_stage = None

        if new_stage is None:
            message = "No next stage available"
        else:
            application.current_stage = new_stage
            application.status = status_for_stage(new_stage)
            _record_history(application, stage, new_stage, actor=actor, score=score, auto_advanced=True)
            message = f"Auto-advanced to {new_stage.value} based on score {score}"

    application_crud.save(db, application)
    logger.info(f"Application {application.id}: {stage.value} score {score}, overall {overall}. {message}")

    return ScoreResult(
        application_id=application.id,
        stage=stage,
        score=score,
        overall_score=overall,
        advanced=new_stage is not None,
        new_stage=new_stage,
        message=message,
    )
