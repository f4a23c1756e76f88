"""
CRUD operations for Application model.

All writes commit immediately: the bulk processor relies on one committed
unit of work per application.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.application import Application
from app.models.job import Job
from app.schemas.application import ApplicationCreate
from app.services.stages import Stage, ApplicationStatus

# Invitation kind -> token column
TOKEN_COLUMNS = {
    "test": "test_token",
    "interview": "interview_token",
}

# Invitation kind -> completion timestamp column
COMPLETION_COLUMNS = {
    "test": "test_completed_at",
    "interview": "interview_completed_at",
}


def create(db: Session, job: Job, data: ApplicationCreate) -> Application:
    application = Application(
        job_id=job.id,
        name=data.name,
        email=str(data.email),
        phone=data.phone,
        resume_url=data.resume_url,
        resume_text=data.resume_text,
        skills=data.skills,
        experience_years=data.experience_years,
        cover_letter=data.cover_letter,
        status=ApplicationStatus.PENDING,
        current_stage=Stage.RESUME_SCREENING,
        stage_history=[],
    )

    db.add(application)
    db.commit()
    db.refresh(application)

    return application


def get_by_id(db: Session, application_id: UUID) -> Optional[Application]:
    return db.query(Application).filter(Application.id == application_id).first()


def get_by_token(db: Session, kind: str, token: str) -> Optional[Application]:
    """Look up the application a candidate access token belongs to."""
    column = getattr(Application, TOKEN_COLUMNS[kind])
    return db.query(Application).filter(column == token).first()


def get_multi(
    db: Session,
    job_id: Optional[UUID] = None,
    status: Optional[ApplicationStatus] = None,
    stage: Optional[Stage] = None,
    min_score: Optional[float] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Application]:
    query = db.query(Application)

    if job_id:
        query = query.filter(Application.job_id == job_id)
    if status:
        query = query.filter(Application.status == status)
    if stage:
        query = query.filter(Application.current_stage == stage)
    if min_score is not None:
        query = query.filter(Application.overall_score >= min_score)

    return query.order_by(Application.created_at.desc()).offset(skip).limit(limit).all()


def get_ids_for_job(db: Session, job_id: UUID) -> List[UUID]:
    rows = db.query(Application.id).filter(Application.job_id == job_id).all()
    return [row[0] for row in rows]


def save(db: Session, application: Application) -> Application:
    """Commit pending changes on ``application`` and reload it."""
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


def claim_token(db: Session, application_id: UUID, kind: str, token: str) -> bool:
    """
    Store ``token`` only if the application has none yet.

    Check and write happen in a single conditional UPDATE, so two concurrent
    invitations can never both succeed.

    Returns:
        True if this call stored the token, False if one already existed
    """
    column_name = TOKEN_COLUMNS[kind]
    column = getattr(Application, column_name)

    updated = (
        db.query(Application)
        .filter(Application.id == application_id, column.is_(None))
        .update({column_name: token}, synchronize_session=False)
    )
    db.commit()

    return updated == 1


def claim_completion(db: Session, application_id: UUID, kind: str, completed_at: datetime) -> bool:
    """
    Mark the test or interview as submitted, only if it is not already.

    Same conditional-UPDATE pattern as claim_token: of two concurrent
    submissions exactly one gets True.
    """
    column_name = COMPLETION_COLUMNS[kind]
    column = getattr(Application, column_name)

    updated = (
        db.query(Application)
        .filter(Application.id == application_id, column.is_(None))
        .update({column_name: completed_at}, synchronize_session=False)
    )
    db.commit()

    return updated == 1
