"""
Domain errors for the candidate pipeline.

Each error carries the HTTP status it maps to, so endpoints can let them
propagate and main.py renders them the same way FastAPI renders HTTPException
(``{"detail": "..."}``). Inside a bulk action they are caught per item instead.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline errors"""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthorized(PipelineError):
    """Caller lacks the hr/admin role"""
    status_code = 401


class ValidationError(PipelineError):
    """Missing field, invalid enum value, score out of range, bad weights"""
    status_code = 400


class InvalidWeights(ValidationError):
    """Scoring weights do not sum to 1.0"""
    pass


class NotFound(PipelineError):
    status_code = 404


class Conflict(PipelineError):
    status_code = 409


class AlreadyInvited(Conflict):
    """The test/interview token for this application already exists"""
    pass


class DuplicateScorecard(Conflict):
    pass


class AlreadySubmitted(Conflict):
    """The candidate already submitted this test or interview"""
    pass


class AlreadyAtFinalStage(PipelineError):
    """No stage follows the current one and no explicit target was given"""
    status_code = 400


class InvalidTransition(PipelineError):
    """The requested stage/status change is not in the transition table"""
    status_code = 400


class ExternalServiceError(PipelineError):
    """Email delivery or AI scoring failed"""
    status_code = 502
