"""
Application database model.

One candidate's application to one job, and its position in the screening
pipeline (see app/services/stages.py for the stage model).
"""

import uuid
from sqlalchemy import Column, String, Float, Text, DateTime, Enum, ForeignKey, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.database import Base, JSONType
from app.services.stages import Stage, ApplicationStatus

SCORE_COLUMNS = (
    "resume_match_score",
    "mcq_score",
    "interview_score",
    "live_interview_score",
    "overall_score",
)


class Application(Base):
    """
    A candidate application.

    ``status`` is the coarse HR-facing state and ``current_stage`` the
    fine-grained pipeline position; the transition engine keeps them
    consistent. Test and interview tokens are capability tokens: whoever
    holds the link can take the test or record the interview.
    """
    __tablename__ = "applications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    job_id = Column(UUID(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    # Candidate details
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)
    resume_url = Column(String, nullable=True)  # Reference into resume storage
    resume_text = Column(Text, nullable=True)   # Extracted text, used for AI matching
    skills = Column(JSONType, nullable=True)    # Parsed skills (list of strings)
    experience_years = Column(Float, nullable=True)
    cover_letter = Column(Text, nullable=True)

    # Pipeline position
    status = Column(
        Enum(ApplicationStatus, values_callable=lambda x: [e.value for e in x]),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True
    )
    current_stage = Column(
        Enum(Stage, values_callable=lambda x: [e.value for e in x]),
        default=Stage.RESUME_SCREENING,
        nullable=False,
        index=True
    )
    # [{"from", "to", "score", "notes", "auto_advanced", "actor", "timestamp"}, ...]
    stage_history = Column(JSONType, nullable=True)

    # Scores (0-100, NULL = stage not completed)
    resume_match_score = Column(Float, nullable=True)
    mcq_score = Column(Float, nullable=True)
    interview_score = Column(Float, nullable=True)  # async interview / communication
    live_interview_score = Column(Float, nullable=True)
    overall_score = Column(Float, nullable=True, index=True)
    ai_match_data = Column(JSONType, nullable=True)  # strengths, concerns, skills match...

    # Async interview submission
    interview_transcript = Column(Text, nullable=True)
    interview_evaluation = Column(JSONType, nullable=True)  # score, strengths, weaknesses, feedback

    # Candidate access tokens (issued at most once each)
    test_token = Column(String(64), nullable=True, unique=True, index=True)
    interview_token = Column(String(64), nullable=True, unique=True, index=True)

    # Timestamps
    test_completed_at = Column(DateTime(timezone=True), nullable=True)
    interview_completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    job = relationship("Job", back_populates="applications")
    scorecards = relationship("InterviewScorecard", back_populates="application", cascade="all, delete-orphan")
    notes = relationship("CandidateNote", back_populates="application", cascade="all, delete-orphan")

    __table_args__ = tuple(
        CheckConstraint(
            f"{column} IS NULL OR ({column} >= 0 AND {column} <= 100)",
            name=f"ck_applications_{column}_range",
        )
        for column in SCORE_COLUMNS
    )

    @property
    def test_invited(self) -> bool:
        return self.test_token is not None

    @property
    def interview_invited(self) -> bool:
        return self.interview_token is not None

    def __repr__(self):
        return f"<Application(id={self.id}, stage={self.current_stage.value}, status={self.status.value})>"
