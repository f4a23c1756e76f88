"""
Overall candidate score.

Per-stage scores (0-100) are combined with the job's scoring weights. Only the
components that have a score take part, and their weights are re-normalised,
so a candidate who has only been resume-screened is not dragged down by tests
they have not taken yet:

    {resume: 80} with weights {resume: .4, mcq: .3, ...}  ->  80, not 32
"""

from typing import Dict, Mapping, Optional

from app.core.exceptions import InvalidWeights

WEIGHT_TOLERANCE = 0.01

# Scoring component -> Application column it reads
SCORE_FIELDS = {
    "resume": "resume_match_score",
    "mcq": "mcq_score",
    "async_interview": "interview_score",
    "live_interview": "live_interview_score",
}

DEFAULT_SCORING_WEIGHTS = {
    "resume": 0.4,
    "mcq": 0.3,
    "async_interview": 0.2,
    "live_interview": 0.1,
}


def validate_weights(weights: Mapping[str, float]) -> None:
    """
    Check a scoring-weight map before it is saved on a job.

    Raises:
        InvalidWeights: Unknown component, negative weight, or a total
            outside 1.0 +/- 0.01
    """
    unknown = set(weights) - set(SCORE_FIELDS)
    if unknown:
        raise InvalidWeights(f"Unknown scoring components: {', '.join(sorted(unknown))}")

    for component, weight in weights.items():
        if weight is None or weight < 0:
            raise InvalidWeights(f"Weight for {component} must be a non-negative number")

    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise InvalidWeights(f"Scoring weights must sum to 1.0 (got {round(total, 4)})")


def compute_overall_score(
    scores: Mapping[str, Optional[float]],
    weights: Mapping[str, float],
) -> Optional[float]:
    """
    Weighted mean of the present component scores.

    Args:
        scores: Component -> score (0-100); missing or None means not completed
        weights: Component -> weight (already validated at config time)

    Returns:
        Score rounded to one decimal, or None if no weighted component has a score
    """
    total_score = 0.0
    total_weight = 0.0

    for component, weight in weights.items():
        score = scores.get(component)
        if score is None or not weight:
            continue
        total_score += score * weight
        total_weight += weight

    if total_weight <= 0:
        return None

    return round(total_score / total_weight, 1)


def scores_from_application(application) -> Dict[str, Optional[float]]:
    """Build the component score map from an Application row."""
    return {component: getattr(application, field) for component, field in SCORE_FIELDS.items()}



def score_category(score: Optional[float]) -> Optional[str]:
    """Bucket shown next to the overall score in HR listings."""
    if score is None:
        return None
    if score >= 80:
        return "strong-fit"
    if score >= 60:
        return "consider"
    if score >= 40:
        return "low-fit"
    return "not-recommended"
