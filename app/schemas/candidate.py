"""
Schemas for the token-gated candidate flows: the MCQ test and the async
interview.
"""

from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, model_validator

from app.services.stages import Stage


class MCQQuestion(BaseModel):
    """One multiple-choice question, as HR stores it (with the answer)."""
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2, max_length=6)
    correct_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def answer_is_an_option(self):
        if self.correct_index >= len(self.options):
            raise ValueError("correct_index must point at one of the options")
        return self


class MCQTestConfig(BaseModel):
    """The MCQ test for a job. Replaced as a whole on update."""
    questions: List[MCQQuestion] = Field(..., min_length=1)


class MCQTestResponse(MCQTestConfig):
    job_id: UUID
    job_title: str


class CandidateQuestion(BaseModel):
    """A question as the candidate sees it: no answer key."""
    question: str
    options: List[str]


class CandidateAccessResponse(BaseModel):
    """What a candidate sees when opening a test or interview link."""
    application_id: UUID
    name: str
    job_title: str
    current_stage: Stage
    completed: bool
    questions: Optional[List[CandidateQuestion]] = None


class MCQSubmission(BaseModel):
    answers: List[int] = Field(..., description="Chosen option index per question, in question order")


class MCQSubmissionResult(BaseModel):
    application_id: UUID
    score: float
    total_questions: int
    correct_answers: int
    passed: bool
    advanced: bool
    new_stage: Optional[Stage] = None
    message: str


class InterviewSubmission(BaseModel):
    transcript: str = Field(..., min_length=1)
    question: Optional[str] = Field(None, description="Question the candidate answered")


class InterviewSubmissionResult(BaseModel):
    application_id: UUID
    scored: bool
    score: Optional[float] = None
    advanced: bool = False
    new_stage: Optional[Stage] = None
    message: str
