from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from enum import Enum


class JobStatusEnum(str, Enum):
    """Job posting status"""
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class JobCreateRequest(BaseModel):
    """Schema for creating a new job"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10)
    location: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience_min: Optional[int] = Field(None, ge=0)
    experience_max: Optional[int] = Field(None, ge=0)
    status: JobStatusEnum = JobStatusEnum.DRAFT


class JobUpdateRequest(BaseModel):
    """Partial update; only fields that are sent are changed"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    location: Optional[str] = None
    skills: Optional[List[str]] = None
    experience_min: Optional[int] = Field(None, ge=0)
    experience_max: Optional[int] = Field(None, ge=0)
    status: Optional[JobStatusEnum] = None


class JobResponse(BaseModel):
    """Schema for job response"""
    id: UUID
    title: str
    description: str
    location: Optional[str] = None
    skills: Optional[List[str]] = None
    experience_min: Optional[int] = None
    experience_max: Optional[int] = None
    status: JobStatusEnum
    pipeline_config: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # Allows conversion from SQLAlchemy models


class JobReanalyzeResponse(BaseModel):
    job_id: UUID
    queued_count: int
    failed_count: int
    message: str
