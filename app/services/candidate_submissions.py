"""
Candidate submissions through test and interview links.

Each flow is one-shot: the completion timestamp is claimed with a
conditional update before anything is scored, so a second (or concurrent)
submission gets AlreadySubmitted. Scores go through
transitions.record_stage_score, which applies the job's auto-advance rules.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import AlreadySubmitted, ExternalServiceError, NotFound, ValidationError
from app.crud import application as application_crud
from app.models.application import Application
from app.schemas.pipeline import PipelineConfig
from app.services import transitions
from app.services.ai_matching import evaluate_interview_transcript
from app.services.stages import Stage

logger = logging.getLogger(__name__)

CANDIDATE_ACTOR = "candidate"
DEFAULT_PASSING_SCORE = 60


@dataclass
class MCQOutcome:
    application_id: object
    score: float
    total_questions: int
    correct_answers: int
    passed: bool
    advanced: bool
    new_stage: Optional[Stage]
    message: str


@dataclass
class InterviewOutcome:
    application_id: object
    scored: bool
    score: Optional[float]
    advanced: bool
    new_stage: Optional[Stage]
    message: str


def _claim(db: Session, application: Application, kind: str) -> None:
    if not application_crud.claim_completion(db, application.id, kind, datetime.now(timezone.utc)):
        label = "Test" if kind == "test" else "Interview"
        raise AlreadySubmitted(f"{label} has already been submitted")


def grade_answers(questions: List[dict], answers: List[int]) -> int:
    """Number of answers matching each question's correct_index."""
    return sum(1 for question, answer in zip(questions, answers) if answer == question["correct_index"])


def submit_mcq_test(db: Session, application: Application, answers: List[int]) -> MCQOutcome:
    """
    Grade a candidate's MCQ answers and record the mcq_test score.

    Raises:
        AlreadySubmitted: The test was already submitted
        NotFound: The job has no MCQ test set up
        ValidationError: The number of answers does not match the questions
    """
    if application.test_completed_at is not None:
        raise AlreadySubmitted("Test has already been submitted")

    questions = application.job.mcq_questions
    if not questions:
        raise NotFound("No test has been set up for this job")
    if len(answers) != len(questions):
        raise ValidationError(f"Expected {len(questions)} answers, got {len(answers)}")

    _claim(db, application, "test")

    correct = grade_answers(questions, answers)
    score = round(correct / len(questions) * 100, 1)
    result = transitions.record_stage_score(db, application, Stage.MCQ_TEST, score, actor=CANDIDATE_ACTOR)

    threshold = PipelineConfig.for_job(application.job).threshold_for(Stage.MCQ_TEST)
    passing_score = DEFAULT_PASSING_SCORE if threshold is None else threshold

    logger.info(f"Application {application.id} submitted MCQ test: {correct}/{len(questions)} ({score})")

    return MCQOutcome(
        application_id=application.id,
        score=score,
        total_questions=len(questions),
        correct_answers=correct,
        passed=score >= passing_score,
        advanced=result.advanced,
        new_stage=result.new_stage,
        message="Test submitted successfully",
    )


async def submit_interview(
    db: Session,
    application: Application,
    transcript: str,
    question: Optional[str] = None,
) -> InterviewOutcome:
    """
    Store an async interview transcript and score it with the AI.

    The transcript is kept even when the AI evaluation fails; the
    async_interview score is then left for HR to record.

    Raises:
        AlreadySubmitted: The interview was already submitted
    """
    if application.interview_completed_at is not None:
        raise AlreadySubmitted("Interview has already been submitted")

    _claim(db, application, "interview")

    application.interview_transcript = transcript
    application_crud.save(db, application)

    try:
        evaluation = await evaluate_interview_transcript(
            transcript=transcript,
            question=question,
            job_title=application.job.title,
        )
    except ExternalServiceError as e:
        logger.warning(f"Interview for application {application.id} stored unscored: {e.message}")
        return InterviewOutcome(
            application_id=application.id,
            scored=False,
            score=None,
            advanced=False,
            new_stage=None,
            message="Interview submitted; it will be reviewed by the hiring team",
        )

    score = round(evaluation.score, 1)
    application.interview_evaluation = evaluation.model_dump(mode="json")
    result = transitions.record_stage_score(
        db, application, Stage.ASYNC_INTERVIEW, score, actor=CANDIDATE_ACTOR
    )

    return InterviewOutcome(
        application_id=application.id,
        scored=True,
        score=score,
        advanced=result.advanced,
        new_stage=result.new_stage,
        message="Interview submitted successfully",
    )
