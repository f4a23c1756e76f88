import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_hr_user
from app.crud import job as job_crud
from app.crud import application as application_crud
from app.models.job import JobStatus
from app.schemas.job import (
    JobCreateRequest,
    JobUpdateRequest,
    JobResponse,
    JobStatusEnum,
    JobReanalyzeResponse,
)
from app.schemas.candidate import MCQTestConfig, MCQTestResponse
from app.schemas.pipeline import PipelineConfig, PipelineConfigResponse
from app.schemas.user import CurrentUser
from app.services.scoring import validate_weights
from app.tasks import scoring_tasks

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = logging.getLogger(__name__)


def _get_job_or_404(db: Session, job_id: UUID):
    job = job_crud.get_by_id(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("/", status_code=201, response_model=JobResponse)
def create_job(
    request: JobCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Create a job posting. Jobs start as drafts unless a status is given;
    only active jobs accept applications.
    """
    new_job = job_crud.create(db, request, created_by=current_user.id)
    logger.info(f"Created job {new_job.id}: {new_job.title} by {current_user.display}")
    return new_job


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    return _get_job_or_404(db, job_id)


@router.get("/", response_model=list[JobResponse])
def list_jobs(
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatusEnum] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    List jobs with pagination and optional status filtering.

    Args:
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100, max: 100)
        status: Optional filter by job status (draft, active, closed)
    """
    if limit > 100:
        limit = 100

    status_filter = JobStatus(status.value) if status else None
    return job_crud.get_multi(db, skip=skip, limit=limit, status=status_filter)


@router.patch("/{job_id}", response_model=JobResponse)
def update_job(
    job_id: UUID,
    request: JobUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    job = _get_job_or_404(db, job_id)
    job = job_crud.update(db, job, request)
    logger.info(f"Updated job {job_id} by {current_user.display}")
    return job


@router.delete("/{job_id}", status_code=204)
def delete_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Delete a job and, by cascade, its applications.
    """
    deleted = job_crud.delete(db, job_id)

    if not deleted:
        raise HTTPException(status_code=404, detail="Job not found")

    logger.info(f"Deleted job {job_id}")
    return None


@router.get("/{job_id}/pipeline", response_model=PipelineConfigResponse)
def get_pipeline_config(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """Pipeline configuration for a job (defaults when none has been saved)."""
    job = _get_job_or_404(db, job_id)
    return PipelineConfigResponse(
        job_id=job.id,
        job_title=job.title,
        pipeline_config=PipelineConfig.for_job(job),
    )


@router.put("/{job_id}/pipeline", response_model=PipelineConfigResponse)
def update_pipeline_config(
    job_id: UUID,
    config: PipelineConfig,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Replace a job's pipeline configuration.

    Scoring weights must sum to 1.0 (within 0.01). Existing overall scores are
    not recomputed until the next score change on each application.
    """
    job = _get_job_or_404(db, job_id)
    validate_weights(config.scoring_weights)

    job = job_crud.update_pipeline_config(db, job, config)
    logger.info(f"Pipeline config for job {job_id} updated by {current_user.display}")

    return PipelineConfigResponse(
        job_id=job.id,
        job_title=job.title,
        pipeline_config=PipelineConfig.for_job(job),
    )


@router.get("/{job_id}/test", response_model=MCQTestResponse)
def get_mcq_test(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """MCQ questions (with answer key) candidates get through test links."""
    job = _get_job_or_404(db, job_id)
    if not job.mcq_questions:
        raise HTTPException(status_code=404, detail="No test has been set up for this job")

    return MCQTestResponse(job_id=job.id, job_title=job.title, questions=job.mcq_questions)


@router.put("/{job_id}/test", response_model=MCQTestResponse)
def update_mcq_test(
    job_id: UUID,
    test: MCQTestConfig,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Replace the job's MCQ questions.

    Submissions already graded keep their score.
    """
    job = _get_job_or_404(db, job_id)
    job = job_crud.update_mcq_test(db, job, test)
    logger.info(f"MCQ test for job {job_id} set to {len(test.questions)} questions by {current_user.display}")

    return MCQTestResponse(job_id=job.id, job_title=job.title, questions=job.mcq_questions)


@router.post("/{job_id}/reanalyze", status_code=202, response_model=JobReanalyzeResponse)
def reanalyze_job_applications(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Queue AI re-analysis for every application of a job.

    One Celery task per application; results land on the applications as
    workers finish. Use GET /applications?job_id=... to follow progress.
    """
    job = _get_job_or_404(db, job_id)
    application_ids = application_crud.get_ids_for_job(db, job.id)

    queued = 0
    failed = 0
    for application_id in application_ids:
        try:
            scoring_tasks.reanalyze_application_task.delay(str(application_id))
            queued += 1
        except Exception as e:
            failed += 1
            logger.error(f"Failed to queue re-analysis for application {application_id}: {e}")

    logger.info(f"Queued re-analysis for {queued}/{len(application_ids)} applications of job {job_id}")

    return JobReanalyzeResponse(
        job_id=job.id,
        queued_count=queued,
        failed_count=failed,
        message=f"Re-analysis queued for {queued} applications",
    )
