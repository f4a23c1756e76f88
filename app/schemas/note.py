from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class NoteResponse(BaseModel):
    id: UUID
    application_id: UUID
    author_id: str
    author_email: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
