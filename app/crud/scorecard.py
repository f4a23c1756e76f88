from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.scorecard import InterviewScorecard
from app.schemas.scorecard import ScorecardCreate


def get_by_id(db: Session, scorecard_id: UUID) -> Optional[InterviewScorecard]:
    return db.query(InterviewScorecard).filter(InterviewScorecard.id == scorecard_id).first()


def get_for_interviewer(db: Session, application_id: UUID, interviewer_id: str) -> Optional[InterviewScorecard]:
    return db.query(InterviewScorecard).filter(
        InterviewScorecard.application_id == application_id,
        InterviewScorecard.interviewer_id == interviewer_id
    ).first()


def get_for_application(db: Session, application_id: UUID) -> List[InterviewScorecard]:
    return (
        db.query(InterviewScorecard)
        .filter(InterviewScorecard.application_id == application_id)
        .order_by(InterviewScorecard.created_at.desc())
        .all()
    )


def create(
    db: Session,
    application_id: UUID,
    interviewer_id: str,
    interviewer_email: Optional[str],
    data: ScorecardCreate,
) -> InterviewScorecard:
    """Add a scorecard; the caller commits."""
    scorecard = InterviewScorecard(
        application_id=application_id,
        interviewer_id=interviewer_id,
        interviewer_email=interviewer_email,
        **data.model_dump(mode="json"),
    )
    db.add(scorecard)
    db.flush()
    return scorecard
