"""
Pydantic schemas for Application API requests/responses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, EmailStr, computed_field

from app.services.scoring import score_category
from app.services.stages import Stage, ApplicationStatus, stage_label


class ApplicationCreate(BaseModel):
    """Submitted by the candidate from the careers page."""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = None
    resume_url: Optional[str] = Field(None, description="Reference into resume storage")
    resume_text: Optional[str] = Field(None, description="Extracted resume text")
    skills: List[str] = Field(default_factory=list)
    experience_years: Optional[float] = Field(None, ge=0)
    cover_letter: Optional[str] = None


class ApplicationSubmitResponse(BaseModel):
    application_id: UUID
    job_id: UUID
    status: ApplicationStatus
    current_stage: Stage
    screening_queued: bool = False
    message: str


class ApplicationListItem(BaseModel):
    """Simplified application info for list endpoints."""
    id: UUID
    job_id: UUID
    name: str
    email: str
    status: ApplicationStatus
    current_stage: Stage
    resume_match_score: Optional[float] = None
    overall_score: Optional[float] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def stage_label(self) -> str:
        return stage_label(self.current_stage)

    @computed_field
    @property
    def score_category(self) -> Optional[str]:
        return score_category(self.overall_score)

    class Config:
        from_attributes = True


class ApplicationResponse(ApplicationListItem):
    """Full application as seen by HR."""
    phone: Optional[str] = None
    resume_url: Optional[str] = None
    skills: Optional[List[str]] = None
    experience_years: Optional[float] = None
    cover_letter: Optional[str] = None
    mcq_score: Optional[float] = None
    interview_score: Optional[float] = None
    live_interview_score: Optional[float] = None
    ai_match_data: Optional[Dict[str, Any]] = None
    stage_history: Optional[List[Dict[str, Any]]] = None
    test_invited: bool = False
    interview_invited: bool = False
    test_completed_at: Optional[datetime] = None
    interview_completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdvanceRequest(BaseModel):
    target_stage: Optional[Stage] = Field(None, description="Explicit target; defaults to the next enabled stage")
    score: Optional[float] = Field(None, ge=0, le=100, description="Recorded in the stage history")
    notes: Optional[str] = None


class RejectRequest(BaseModel):
    send_rejection_email: bool = False
    rejection_reason: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: ApplicationStatus


class TransitionResponse(BaseModel):
    application_id: UUID
    previous_stage: Stage
    new_stage: Stage
    status: ApplicationStatus
    changed: bool = True
    notify_succeeded: Optional[bool] = None
    notify_error: Optional[str] = None


class ScoreRecordRequest(BaseModel):
    stage: Stage
    score: float = Field(..., ge=0, le=100)


class ScoreRecordResponse(BaseModel):
    application_id: UUID
    stage: Stage
    score: float
    overall_score: Optional[float] = None
    advanced: bool
    new_stage: Optional[Stage] = None
    message: str


class InviteResponse(BaseModel):
    application_id: UUID
    kind: str
    link: str
    notify_succeeded: bool
    notify_error: Optional[str] = None


class ReanalyzeResponse(BaseModel):
    application_id: UUID
    match_score: float
    previous_score: Optional[float] = None
    score_change: float
    overall_score: Optional[float] = None
    advanced: bool = False
    current_stage: Optional[Stage] = None
    recommendation: Optional[str] = None
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    summary: Optional[str] = None
