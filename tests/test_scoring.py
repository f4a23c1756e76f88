"""
Unit tests for the overall score and weight validation.
"""

import pytest

from app.core.exceptions import InvalidWeights
from app.schemas.pipeline import PipelineConfig
from app.services.scoring import (
    DEFAULT_SCORING_WEIGHTS,
    compute_overall_score,
    score_category,
    validate_weights,
)


class TestComputeOverallScore:
    """Tests for the re-normalized weighted mean"""

    def test_single_component_is_renormalized(self):
        """Only the resume score present: 80, not 0.4 * 80 = 32"""
        assert compute_overall_score({"resume": 80}, DEFAULT_SCORING_WEIGHTS) == 80

    def test_two_components(self):
        scores = {"resume": 80, "mcq": 60}
        # (80*0.4 + 60*0.3) / 0.7 = 71.43
        assert compute_overall_score(scores, DEFAULT_SCORING_WEIGHTS) == 71.4

    def test_all_components(self):
        scores = {"resume": 80, "mcq": 70, "async_interview": 60, "live_interview": 100}
        assert compute_overall_score(scores, DEFAULT_SCORING_WEIGHTS) == 75.0

    def test_missing_scores_are_ignored(self):
        scores = {"resume": 90, "mcq": None}
        assert compute_overall_score(scores, DEFAULT_SCORING_WEIGHTS) == 90

    def test_no_scores(self):
        assert compute_overall_score({}, DEFAULT_SCORING_WEIGHTS) is None

    def test_zero_weight_component_does_not_count(self):
        weights = {"resume": 1.0, "mcq": 0.0}
        assert compute_overall_score({"resume": 50, "mcq": 100}, weights) == 50


class TestValidateWeights:
    """Tests for scoring-weight validation"""

    def test_weights_summing_to_one(self):
        validate_weights({"resume": 0.5, "mcq": 0.5})

    def test_default_weights_are_valid(self):
        validate_weights(DEFAULT_SCORING_WEIGHTS)

    def test_within_tolerance(self):
        validate_weights({"resume": 0.333, "mcq": 0.333, "async_interview": 0.333})

    def test_weights_summing_to_point_nine(self):
        with pytest.raises(InvalidWeights):
            validate_weights({"resume": 0.5, "mcq": 0.4})

    def test_unknown_component(self):
        with pytest.raises(InvalidWeights):
            validate_weights({"resume": 0.5, "references": 0.5})

    def test_negative_weight(self):
        with pytest.raises(InvalidWeights):
            validate_weights({"resume": 1.5, "mcq": -0.5})


class TestPipelineConfigDefaults:
    """Default pipeline configuration"""

    def test_default_thresholds(self):
        config = PipelineConfig()
        assert config.threshold_for("resume_screening") == 60
        assert config.threshold_for("mcq_test") == 60
        assert config.threshold_for("async_interview") == 50
        assert config.threshold_for("live_interview") is None

    def test_all_stages_enabled_by_default(self):
        assert len(PipelineConfig().enabled_stages()) == 5

    def test_terminal_stage_cannot_be_configured(self):
        with pytest.raises(ValueError):
            PipelineConfig(stages={"hired": {"enabled": True}})


class TestScoreCategory:
    @pytest.mark.parametrize("score,expected", [
        (95, "strong-fit"),
        (80, "strong-fit"),
        (79.9, "consider"),
        (60, "consider"),
        (45, "low-fit"),
        (12, "not-recommended"),
        (None, None),
    ])
    def test_buckets(self, score, expected):
        assert score_category(score) == expected
