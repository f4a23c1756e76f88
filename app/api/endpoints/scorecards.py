import logging
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_hr_user
from app.crud import application as application_crud
from app.crud import scorecard as scorecard_crud
from app.schemas.scorecard import ScorecardCreate, ScorecardResponse
from app.schemas.user import CurrentUser
from app.services.scorecards import submit_scorecard, remove_scorecard

router = APIRouter(tags=["Scorecards"])
logger = logging.getLogger(__name__)


@router.post("/applications/{application_id}/scorecards", status_code=201, response_model=ScorecardResponse)
def create_scorecard(
    application_id: UUID,
    request: ScorecardCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """
    Submit the caller's interview scorecard for an application.

    One scorecard per interviewer and application (409 on a second one).
    The mean overall rating, scaled to 0-100, becomes the live interview score.
    """
    application = application_crud.get_by_id(db, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    scorecard, _ = submit_scorecard(db, application, current_user, request)
    return scorecard


@router.get("/applications/{application_id}/scorecards", response_model=list[ScorecardResponse])
def list_scorecards(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    if not application_crud.get_by_id(db, application_id):
        raise HTTPException(status_code=404, detail="Application not found")
    return scorecard_crud.get_for_application(db, application_id)


@router.delete("/scorecards/{scorecard_id}", status_code=204)
def delete_scorecard(
    scorecard_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    scorecard = scorecard_crud.get_by_id(db, scorecard_id)
    if not scorecard:
        raise HTTPException(status_code=404, detail="Scorecard not found")

    remove_scorecard(db, scorecard)
    logger.info(f"Scorecard {scorecard_id} deleted by {current_user.display}")
    return None
