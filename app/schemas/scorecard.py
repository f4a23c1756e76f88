from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field


class Recommendation(str, Enum):
    STRONG_HIRE = "strong_hire"
    HIRE = "hire"
    NO_HIRE = "no_hire"
    STRONG_NO_HIRE = "strong_no_hire"


class ScorecardCreate(BaseModel):
    """Ratings are on a 1-5 scale"""
    technical_skills: Optional[int] = Field(None, ge=1, le=5)
    communication: Optional[int] = Field(None, ge=1, le=5)
    problem_solving: Optional[int] = Field(None, ge=1, le=5)
    cultural_fit: Optional[int] = Field(None, ge=1, le=5)
    leadership: Optional[int] = Field(None, ge=1, le=5)
    overall_rating: int = Field(..., ge=1, le=5)
    recommendation: Optional[Recommendation] = None
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class ScorecardResponse(BaseModel):
    id: UUID
    application_id: UUID
    interviewer_id: str
    interviewer_email: Optional[str] = None
    technical_skills: Optional[int] = None
    communication: Optional[int] = None
    problem_solving: Optional[int] = None
    cultural_fit: Optional[int] = None
    leadership: Optional[int] = None
    overall_rating: int
    recommendation: Optional[Recommendation] = None
    strengths: Optional[List[str]] = None
    concerns: Optional[List[str]] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
