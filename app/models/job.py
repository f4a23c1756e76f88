import enum
import uuid
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.database import Base, JSONType


class JobStatus(str, enum.Enum):
    """
    Job posting lifecycle.

    - DRAFT: Being written, not visible to candidates
    - ACTIVE: Published, accepting applications
    - CLOSED: No longer accepting applications
    """
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class Job(Base):
    """
    A job posting.

    Owns its applications and the pipeline configuration (enabled stages,
    auto-advance thresholds, scoring weights) used to move them along.
    """
    __tablename__ = "jobs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=True)
    skills = Column(JSONType, nullable=True)  # list of required skills
    experience_min = Column(Integer, nullable=True)
    experience_max = Column(Integer, nullable=True)

    status = Column(
        Enum(JobStatus, values_callable=lambda x: [e.value for e in x]),
        default=JobStatus.DRAFT,
        nullable=False,
        index=True
    )

    # Structure matches PipelineConfig from app/schemas/pipeline.py; NULL means defaults
    pipeline_config = Column(JSONType, nullable=True)

    # [{"question", "options", "correct_index"}, ...] matching MCQQuestion; NULL means no test set up
    mcq_questions = Column(JSONType, nullable=True)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")

    @property
    def is_accepting_applications(self) -> bool:
        return self.status == JobStatus.ACTIVE

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', status={self.status.value})>"
