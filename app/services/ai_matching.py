import json
import logging
import asyncio
from typing import List, Optional, Type, TypeVar
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, field_validator
from app.core.config import settings
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResumeMatchError(ExternalServiceError):
    """Raised when the AI match analysis fails after all retries"""
    pass


class TranscriptEvaluationError(ExternalServiceError):
    """Raised when the interview transcript evaluation fails after all retries"""
    pass


class SkillsMatch(BaseModel):
    matched: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    additional: List[str] = Field(default_factory=list)


class ExperienceMatch(BaseModel):
    candidate_years: Optional[float] = None
    meets_requirement: Optional[bool] = None
    analysis: Optional[str] = None


class ResumeMatchAnalysis(BaseModel):
    """Structure the AI must return for a resume/job comparison."""
    match_score: float
    skills_match: SkillsMatch = Field(default_factory=SkillsMatch)
    experience_match: ExperienceMatch = Field(default_factory=ExperienceMatch)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    recommendation: Optional[str] = None
    summary: Optional[str] = None

    @field_validator("match_score")
    @classmethod
    def clamp_score(cls, v: float) -> float:
        """Models occasionally answer slightly outside 0-100"""
        return max(0.0, min(100.0, float(v)))


def _get_schema_example() -> str:
    """JSON example for the AI to follow"""
    return """
{
  "match_score": 78,
  "skills_match": {
    "matched": ["Python", "PostgreSQL"],
    "missing": ["Kubernetes"],
    "additional": ["Terraform"]
  },
  "experience_match": {
    "candidate_years": 6,
    "meets_requirement": true,
    "analysis": "Six years of backend work against a 5+ requirement"
  },
  "strengths": ["Built and operated FastAPI services in production"],
  "concerns": ["No container orchestration experience"],
  "recommendation": "Good Match",
  "summary": "Solid backend engineer whose experience lines up with most requirements..."
}
"""


async def _complete_json(
    system_prompt: str,
    user_prompt: str,
    model: Type[ModelT],
    error_cls: Type[ExternalServiceError],
    label: str,
    max_retries: int = 3,
) -> ModelT:
    """
    Run one JSON-mode chat completion and validate it into ``model``.
    Implements retry logic with exponential backoff.

    Raises:
        error_cls: If the call or validation fails after all retries
    """
    client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)

    for attempt in range(max_retries):
        try:
            response = await client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ],
                response_format={"type": "json_object"},
                temperature=settings.OPENAI_TEMPERATURE
            )

            content = response.choices[0].message.content
            if not content:
                raise error_cls("Empty response from OpenAI")

            return model(**json.loads(content))

        except json.JSONDecodeError as e:
            logger.warning(f"Attempt {attempt + 1}/{max_retries}: Failed to parse JSON: {e}")
            if attempt == max_retries - 1:
                raise error_cls(f"Invalid JSON after {max_retries} attempts: {e}")

        except Exception as e:
            logger.warning(f"Attempt {attempt + 1}/{max_retries}: {label} error: {e}")
            if attempt == max_retries - 1:
                raise error_cls(f"{label} failed after {max_retries} attempts: {e}")

        # Exponential backoff: wait 1s, 2s, 4s between retries
        if attempt < max_retries - 1:
            wait_time = 2 ** attempt
            logger.info(f"Retrying in {wait_time} seconds...")
            await asyncio.sleep(wait_time)

    raise error_cls(f"{label} failed after {max_retries} attempts")


async def match_resume_to_job(
    resume_text: str,
    job_title: str,
    job_description: str,
    skills: Optional[List[str]] = None,
    experience_min: Optional[int] = None,
    experience_max: Optional[int] = None,
    location: Optional[str] = None,
    max_retries: int = 3,
) -> ResumeMatchAnalysis:
    """
    Ask the LLM how well a resume matches a job.
    Implements retry logic with exponential backoff.

    Returns:
        The validated analysis (match_score in 0-100)

    Raises:
        ResumeMatchError: If the call or validation fails after all retries
    """
    system_prompt = f"""You are an expert ATS (Applicant Tracking System) analyzer and HR professional.
Provide accurate, fair and detailed candidate-job matching analysis.

Consider:
- Technical skills alignment
- Years of experience
- Education background
- Industry experience
- Project relevance

recommendation must be one of: "Strong Match", "Good Match", "Moderate Match", "Weak Match", "Poor Match".

Return ONLY valid JSON matching this exact structure:
{_get_schema_example()}"""

    user_prompt = f"""JOB DETAILS:
Title: {job_title or "Not specified"}
Required Experience: {experience_min or 0}-{experience_max or 5} years
Key Skills Required: {", ".join(skills) if skills else "Not specified"}
Location: {location or "Not specified"}

JOB DESCRIPTION:
{job_description}

CANDIDATE RESUME:
{resume_text}"""

    analysis = await _complete_json(
        system_prompt, user_prompt, ResumeMatchAnalysis, ResumeMatchError, "Resume analysis", max_retries
    )
    logger.info(f"Resume match analysis complete for '{job_title}': {analysis.match_score}/100")
    return analysis


class TranscriptEvaluation(BaseModel):
    """Structure the AI must return for an async interview answer."""
    score: float
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    feedback: Optional[str] = None

    @field_validator("score")
    @classmethod
    def clamp_score(cls, v: float) -> float:
        return max(0.0, min(100.0, float(v)))


async def evaluate_interview_transcript(
    transcript: str,
    question: Optional[str] = None,
    job_title: Optional[str] = None,
    max_retries: int = 3,
) -> TranscriptEvaluation:
    """
    Score a candidate's async interview answer (0-100).

    Raises:
        TranscriptEvaluationError: If the call or validation fails after all retries
    """
    system_prompt = """You are an expert interviewer evaluating candidate responses.
Evaluate the candidate's answer for correctness, structure and communication.

Return ONLY valid JSON with this structure:
{"score": 72, "strengths": ["..."], "weaknesses": ["..."], "feedback": "..."}"""

    user_prompt = f"""Role: {job_title or "Not specified"}
Question: {question or "Tell me about yourself"}
Answer: {transcript}"""

    evaluation = await _complete_json(
        system_prompt, user_prompt, TranscriptEvaluation, TranscriptEvaluationError, "Transcript evaluation", max_retries
    )
    logger.info(f"Interview transcript evaluated for '{job_title}': {evaluation.score}/100")
    return evaluation
