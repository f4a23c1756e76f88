"""
Public, token-gated endpoints for candidates.

A test or interview token grants access to exactly one application and
nothing else; no HR credentials are involved. Links stop working once the
application is hired or rejected.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.crud import application as application_crud
from app.models.application import Application
from app.schemas.candidate import (
    CandidateAccessResponse,
    CandidateQuestion,
    MCQSubmission,
    MCQSubmissionResult,
    InterviewSubmission,
    InterviewSubmissionResult,
)
from app.services import candidate_submissions
from app.services.stages import is_terminal

router = APIRouter(prefix="/candidate", tags=["Candidate Access"])
logger = logging.getLogger(__name__)


def _resolve(db: Session, kind: str, token: str) -> Application:
    application = application_crud.get_by_token(db, kind, token)
    if not application or is_terminal(application.current_stage):
        raise HTTPException(status_code=404, detail="Invalid or expired link")
    return application


def _access(application: Application, kind: str) -> CandidateAccessResponse:
    completed_at = application.test_completed_at if kind == "test" else application.interview_completed_at

    questions = None
    if kind == "test" and application.job.mcq_questions and completed_at is None:
        questions = [
            CandidateQuestion(question=q["question"], options=q["options"])
            for q in application.job.mcq_questions
        ]

    return CandidateAccessResponse(
        application_id=application.id,
        name=application.name,
        job_title=application.job.title,
        current_stage=application.current_stage,
        completed=completed_at is not None,
        questions=questions,
    )


@router.get("/test/{token}", response_model=CandidateAccessResponse)
def get_test_access(token: str, db: Session = Depends(get_db)):
    """Resolve an MCQ test link to the candidate's application and its questions (no answer key)."""
    return _access(_resolve(db, "test", token), "test")


@router.post("/test/{token}", response_model=MCQSubmissionResult)
def submit_test(token: str, request: MCQSubmission, db: Session = Depends(get_db)):
    """
    Submit MCQ answers. Graded immediately; the score can auto-advance the
    application. A test can be submitted once (409 afterwards).
    """
    application = _resolve(db, "test", token)
    outcome = candidate_submissions.submit_mcq_test(db, application, request.answers)
    return MCQSubmissionResult(**vars(outcome))


@router.get("/interview/{token}", response_model=CandidateAccessResponse)
def get_interview_access(token: str, db: Session = Depends(get_db)):
    """Resolve an async interview link to the candidate's application."""
    return _access(_resolve(db, "interview", token), "interview")


@router.post("/interview/{token}", response_model=InterviewSubmissionResult)
async def submit_interview(token: str, request: InterviewSubmission, db: Session = Depends(get_db)):
    """
    Submit the async interview transcript. It is scored by the AI; the score
    can auto-advance the application. An interview can be submitted once
    (409 afterwards).
    """
    application = _resolve(db, "interview", token)
    outcome = await candidate_submissions.submit_interview(
        db, application, request.transcript, request.question
    )
    return InterviewSubmissionResult(**vars(outcome))
