"""
Interview scorecards feed the application's live_interview_score.

live_interview_score = mean(overall_rating) * 20 over all scorecards of the
application, so a 1-5 rating lands on the 0-100 score scale.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateScorecard
from app.crud import application as application_crud
from app.crud import scorecard as scorecard_crud
from app.models.application import Application
from app.models.scorecard import InterviewScorecard
from app.schemas.scorecard import ScorecardCreate
from app.schemas.user import CurrentUser
from app.services import transitions
from app.services.stages import Stage

logger = logging.getLogger(__name__)

RATING_SCALE = 20


def live_interview_score(scorecards: List[InterviewScorecard]) -> Optional[float]:
    ratings = [card.overall_rating for card in scorecards if card.overall_rating is not None]
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings) * RATING_SCALE, 1)


def submit_scorecard(
    db: Session,
    application: Application,
    interviewer: CurrentUser,
    data: ScorecardCreate,
) -> Tuple[InterviewScorecard, transitions.ScoreResult]:
    """
    Store one interviewer's scorecard and refresh the live interview score.

    Raises:
        DuplicateScorecard: This interviewer already scored the application
    """
    if scorecard_crud.get_for_interviewer(db, application.id, interviewer.id):
        raise DuplicateScorecard("You have already submitted a scorecard for this application")

    try:
        scorecard = scorecard_crud.create(db, application.id, interviewer.id, interviewer.email, data)
    except IntegrityError:
        db.rollback()
        raise DuplicateScorecard("You have already submitted a scorecard for this application")

    score = live_interview_score(scorecard_crud.get_for_application(db, application.id))
    # Commits the scorecard together with the new score
    result = transitions.record_stage_score(
        db, application, Stage.LIVE_INTERVIEW, score, actor=interviewer.display
    )
    db.refresh(scorecard)

    logger.info(f"Scorecard {scorecard.id} by {interviewer.display} for application {application.id}")
    return scorecard, result


def remove_scorecard(db: Session, scorecard: InterviewScorecard) -> Optional[float]:
    """Delete a scorecard and recompute the scores it contributed to."""
    application = scorecard.application
    scorecard_id = scorecard.id
    # delete-orphan cascade removes the row on flush
    application.scorecards.remove(scorecard)
    db.flush()

    application.live_interview_score = live_interview_score(
        scorecard_crud.get_for_application(db, application.id)
    )
    transitions.recompute_overall_score(application)
    application_crud.save(db, application)

    logger.info(f"Scorecard {scorecard_id} deleted; live interview score now {application.live_interview_score}")
    return application.live_interview_score
