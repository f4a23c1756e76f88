"""
Interview scorecard model.

Structured feedback from one interviewer after a live interview. Each
interviewer submits at most one scorecard per application.
"""

import uuid
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.database import Base, JSONType


class InterviewScorecard(Base):
    __tablename__ = "interview_scorecards"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    application_id = Column(
        UUID(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    interviewer_id = Column(String, nullable=False, index=True)
    interviewer_email = Column(String, nullable=True)

    # Ratings 1-5
    technical_skills = Column(Integer, nullable=True)
    communication = Column(Integer, nullable=True)
    problem_solving = Column(Integer, nullable=True)
    cultural_fit = Column(Integer, nullable=True)
    leadership = Column(Integer, nullable=True)
    overall_rating = Column(Integer, nullable=False)

    recommendation = Column(String, nullable=True)  # strong_hire, hire, no_hire, strong_no_hire
    strengths = Column(JSONType, nullable=True)
    concerns = Column(JSONType, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    application = relationship("Application", back_populates="scorecards")

    __table_args__ = (
        UniqueConstraint("application_id", "interviewer_id", name="uq_scorecard_application_interviewer"),
    )

    def __repr__(self):
        return f"<InterviewScorecard(application_id={self.application_id}, overall_rating={self.overall_rating})>"
