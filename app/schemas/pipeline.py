"""
Per-job pipeline configuration.

Stored as JSON on ``jobs.pipeline_config``; a NULL column means the defaults below.
"""

from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from app.services.stages import Stage, STAGE_ORDER
from app.services.scoring import DEFAULT_SCORING_WEIGHTS


class StageSettings(BaseModel):
    """Settings for one canonical stage"""
    enabled: bool = True
    auto_advance_threshold: Optional[float] = Field(
        None, ge=0, le=100, description="Score at or above which candidates move on automatically"
    )


def default_stage_settings() -> Dict[Stage, StageSettings]:
    return {
        Stage.RESUME_SCREENING: StageSettings(auto_advance_threshold=60),
        Stage.MCQ_TEST: StageSettings(auto_advance_threshold=60),
        Stage.ASYNC_INTERVIEW: StageSettings(auto_advance_threshold=50),
        Stage.LIVE_INTERVIEW: StageSettings(),
        Stage.OFFER: StageSettings(),
    }


class PipelineConfig(BaseModel):
    """
    Which stages a job uses, when candidates auto-advance, and how stage
    scores are weighted into the overall score.

    Weights are checked with scoring.validate_weights when the config is saved.
    """
    stages: Dict[Stage, StageSettings] = Field(default_factory=default_stage_settings)
    scoring_weights: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_SCORING_WEIGHTS))

    @field_validator("stages")
    @classmethod
    def only_canonical_stages(cls, v: Dict[Stage, StageSettings]) -> Dict[Stage, StageSettings]:
        terminal = [stage.value for stage in v if stage not in STAGE_ORDER]
        if terminal:
            raise ValueError(f"Terminal stages cannot be configured: {', '.join(terminal)}")
        return v

    def settings_for(self, stage: Stage) -> StageSettings:
        return self.stages.get(Stage(stage), StageSettings())

    def enabled_stages(self) -> List[Stage]:
        return [stage for stage in STAGE_ORDER if self.settings_for(stage).enabled]

    def threshold_for(self, stage: Stage) -> Optional[float]:
        return self.settings_for(stage).auto_advance_threshold

    @classmethod
    def for_job(cls, job) -> "PipelineConfig":
        if job is None or not job.pipeline_config:
            return cls()
        return cls.model_validate(job.pipeline_config)


class PipelineConfigResponse(BaseModel):
    job_id: UUID
    job_title: str
    pipeline_config: PipelineConfig
