"""
AI re-analysis of an application's resume against its job.
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.crud import application as application_crud
from app.models.application import Application
from app.services import transitions
from app.services.ai_matching import match_resume_to_job
from app.services.stages import Stage

logger = logging.getLogger(__name__)

SCREENING_ACTOR = "ai-screening"


async def reanalyze_application(
    db: Session,
    application: Application,
    auto_advance: bool = False,
) -> Dict[str, Any]:
    """
    Re-score the resume match, store the analysis and refresh the overall score.

    With ``auto_advance`` the match score goes through record_stage_score as
    the resume_screening score, so an application still at resume_screening
    moves on when it reaches the stage threshold. Otherwise the stage is
    never changed.

    Returns:
        dict shaped like ReanalyzeResponse

    Raises:
        ValidationError: The application has no resume text
        ResumeMatchError: The AI call failed after retries (502)
    """
    if not application.resume_text:
        raise ValidationError("Application has no resume text to analyze")

    job = application.job
    previous_score = application.resume_match_score

    analysis = await match_resume_to_job(
        resume_text=application.resume_text,
        job_title=job.title,
        job_description=job.description,
        skills=job.skills,
        experience_min=job.experience_min,
        experience_max=job.experience_max,
        location=job.location,
    )

    match_score = round(analysis.match_score, 1)
    application.ai_match_data = analysis.model_dump(mode="json")
    advanced = False

    if auto_advance:
        result = transitions.record_stage_score(
            db, application, Stage.RESUME_SCREENING, match_score, actor=SCREENING_ACTOR
        )
        advanced = result.advanced
    else:
        application.resume_match_score = match_score
        transitions.recompute_overall_score(application)
        application_crud.save(db, application)

    score_change = round(match_score - (previous_score or 0), 1)
    logger.info(
        f"Re-analyzed application {application.id}: {previous_score} -> {match_score}"
        f"{' (auto-advanced)' if advanced else ''}"
    )

    return {
        "application_id": application.id,
        "match_score": match_score,
        "previous_score": previous_score,
        "score_change": score_change,
        "overall_score": application.overall_score,
        "advanced": advanced,
        "current_stage": application.current_stage,
        "recommendation": analysis.recommendation,
        "strengths": analysis.strengths,
        "concerns": analysis.concerns,
        "summary": analysis.summary,
    }
