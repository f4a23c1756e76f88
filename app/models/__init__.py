"""
Database models package.
"""

from app.models.job import Job, JobStatus
from app.models.application import Application
from app.models.scorecard import InterviewScorecard
from app.models.note import CandidateNote

__all__ = ["Job", "JobStatus", "Application", "InterviewScorecard", "CandidateNote"]
