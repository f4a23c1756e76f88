"""
CRUD operations for Job model.

Implements the Repository pattern to encapsulate all database operations
for jobs, providing a clean interface for the API layer.
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.job import Job, JobStatus
from app.schemas.job import JobCreateRequest, JobUpdateRequest
from app.schemas.candidate import MCQTestConfig
from app.schemas.pipeline import PipelineConfig


def create(db: Session, job_data: JobCreateRequest, created_by: Optional[str] = None) -> Job:
    """
    Create a new job in the database.

    Args:
        db: Database session
        job_data: Validated job creation data
        created_by: Id of the HR user creating the job

    Returns:
        Created Job instance with id
    """
    db_job = Job(
        title=job_data.title,
        description=job_data.description,
        location=job_data.location,
        skills=job_data.skills,
        experience_min=job_data.experience_min,
        experience_max=job_data.experience_max,
        status=JobStatus(job_data.status.value),
        created_by=created_by,
    )

    db.add(db_job)
    db.commit()
    db.refresh(db_job)

    return db_job


def get_by_id(db: Session, job_id: UUID) -> Optional[Job]:
    """Retrieve a job by its ID, or None."""
    return db.query(Job).filter(Job.id == job_id).first()


def get_multi(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatus] = None
) -> List[Job]:
    """
    Retrieve multiple jobs with pagination and optional filtering.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return
        status: Optional status filter

    Returns:
        List of Job instances, newest first
    """
    query = db.query(Job)

    if status:
        query = query.filter(Job.status == status)

    return query.order_by(Job.created_at.desc()).offset(skip).limit(limit).all()


def update(db: Session, job: Job, job_data: JobUpdateRequest) -> Job:
    """Apply the fields present in ``job_data`` to ``job``."""
    changes = job_data.model_dump(exclude_unset=True)
    if "status" in changes and changes["status"] is not None:
        changes["status"] = JobStatus(changes["status"])

    for field, value in changes.items():
        setattr(job, field, value)

    db.commit()
    db.refresh(job)
    return job


def update_pipeline_config(db: Session, job: Job, config: PipelineConfig) -> Job:
    """Store a (validated) pipeline configuration on the job."""
    job.pipeline_config = config.model_dump(mode="json")
    db.commit()
    db.refresh(job)
    return job


def delete(db: Session, job_id: UUID) -> bool:
    """
    Delete a job by ID (applications cascade).

    Returns:
        True if deleted, False if not found
    """
    job = get_by_id(db, job_id)
    if not job:
        return False

    db.delete(job)
    db.commit()

    return True


def update_mcq_test(db: Session, job: Job, test: MCQTestConfig) -> Job:
    """Replace the job's MCQ questions."""
    job.mcq_questions = [question.model_dump() for question in test.questions]
    db.commit()
    db.refresh(job)
    return job
