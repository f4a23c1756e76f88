"""
Candidate pipeline stage model.

    resume_screening -> mcq_test -> async_interview -> live_interview -> offer -> hired
            |               |              |                 |            |
            +---------------+--------------+-----------------+------------+--> rejected

``hired`` and ``rejected`` are absorbing. Every legal move is decided by
``check_transition``; nothing else in the codebase compares stage strings.
"""

import enum
from typing import Iterable, Optional

from app.core.exceptions import AlreadyAtFinalStage, InvalidTransition


class Stage(str, enum.Enum):
    RESUME_SCREENING = "resume_screening"
    MCQ_TEST = "mcq_test"
    ASYNC_INTERVIEW = "async_interview"
    LIVE_INTERVIEW = "live_interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


class ApplicationStatus(str, enum.Enum):
    """
    Coarse-grained status shown to HR.

    Kept consistent with the stage: REJECTED iff stage is rejected,
    HIRED iff stage is hired.
    """
    PENDING = "pending"
    SHORTLISTED = "shortlisted"
    IN_PROGRESS = "in_progress"
    REJECTED = "rejected"
    HIRED = "hired"


# Canonical forward order
STAGE_ORDER = (
    Stage.RESUME_SCREENING,
    Stage.MCQ_TEST,
    Stage.ASYNC_INTERVIEW,
    Stage.LIVE_INTERVIEW,
    Stage.OFFER,
)

TERMINAL_STAGES = frozenset({Stage.HIRED, Stage.REJECTED})

STAGE_LABELS = {
    Stage.RESUME_SCREENING: "Resume Screening",
    Stage.MCQ_TEST: "MCQ Test",
    Stage.ASYNC_INTERVIEW: "Async Interview",
    Stage.LIVE_INTERVIEW: "Live Interview",
    Stage.OFFER: "Offer",
    Stage.HIRED: "Hired",
    Stage.REJECTED: "Rejected",
}


def is_terminal(stage: Stage) -> bool:
    return Stage(stage) in TERMINAL_STAGES


def stage_label(stage: Stage) -> str:
    return STAGE_LABELS[Stage(stage)]


def status_for_stage(stage: Stage) -> ApplicationStatus:
    """Status an application takes when it lands on ``stage``."""
    stage = Stage(stage)
    if stage == Stage.HIRED:
        return ApplicationStatus.HIRED
    if stage == Stage.REJECTED:
        return ApplicationStatus.REJECTED
    return ApplicationStatus.IN_PROGRESS


def next_stage(current: Stage, enabled_stages: Optional[Iterable[Stage]] = None) -> Stage:
    """
    Return the stage that follows ``current`` in the canonical order.

    Args:
        current: The application's current stage
        enabled_stages: Stages enabled in the job's pipeline configuration.
            Disabled stages are skipped. None means all stages are enabled.

    Raises:
        AlreadyAtFinalStage: If no (enabled) stage follows ``current``
        InvalidTransition: If ``current`` is terminal
    """
    current = Stage(current)
    if is_terminal(current):
        raise InvalidTransition(f"Application is already {current.value}")

    enabled = set(STAGE_ORDER) if enabled_stages is None else {Stage(s) for s in enabled_stages}

    index = STAGE_ORDER.index(current)
    for stage in STAGE_ORDER[index + 1:]:
        if stage in enabled:
            return stage

    raise AlreadyAtFinalStage("Already at final stage")


def check_transition(current: Stage, target: Stage, allow_fast_track_hire: bool = False) -> None:
    """
    Validate a move from ``current`` to ``target``.

    Allowed:
    - any non-terminal stage -> any other non-terminal stage (forward skips and
      backward corrections by HR)
    - any non-terminal stage -> rejected
    - offer -> hired (any non-terminal stage -> hired when fast-track hire is on)

    Raises:
        InvalidTransition: For every other move
    """
    current = Stage(current)
    target = Stage(target)

    if is_terminal(current):
        raise InvalidTransition(
            f"Cannot move from {current.value} to {target.value}: {current.value} is final"
        )

    if target == current:
        raise InvalidTransition(f"Application is already at {current.value}")

    if target == Stage.HIRED and current != Stage.OFFER and not allow_fast_track_hire:
        raise InvalidTransition(
            f"Cannot hire from {current.value}: candidates must reach offer first"
        )
