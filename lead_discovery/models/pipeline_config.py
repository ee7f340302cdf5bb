"""
Pipeline Configuration Models
"""

from typing import Optional
from pydantic import BaseModel, Field, model_validator

from ..config.settings import DEFAULT_THRESHOLDS, DEFAULT_TIMEOUTS, JOB_WORKERS


class ScoringThresholds(BaseModel):
    """Score cutoffs applied after scoring"""
    qualification: int = Field(DEFAULT_THRESHOLDS["qualification"], ge=0, le=100)
    high_score: int = Field(DEFAULT_THRESHOLDS["high_score"], ge=0, le=100)

    @model_validator(mode="after")
    def _ordered(self):
        if self.high_score < self.qualification:
            raise ValueError("high_score threshold must not be below qualification")
        return self


class TimeoutConfig(BaseModel):
    """Bounded waits for external collaborators, in seconds"""
    acquisition_s: float = Field(DEFAULT_TIMEOUTS["acquisition_s"], gt=0)
    enrichment_s: float = Field(DEFAULT_TIMEOUTS["enrichment_s"], gt=0)
    website_fetch_s: float = Field(DEFAULT_TIMEOUTS["website_fetch_s"], gt=0)


class PipelineConfig(BaseModel):
    """Complete discovery pipeline configuration"""
    name: str = "Default Pipeline"
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    job_workers: int = Field(JOB_WORKERS, ge=1)


def create_default_pipeline_config(
    qualification_threshold: Optional[int] = None,
    high_score_threshold: Optional[int] = None,
    enrichment_timeout_s: Optional[float] = None,
) -> PipelineConfig:
    """
    Factory function to create a pipeline config with environment defaults
    """
    config = PipelineConfig()

    if qualification_threshold is not None or high_score_threshold is not None:
        config.thresholds = ScoringThresholds(
            qualification=(
                qualification_threshold
                if qualification_threshold is not None
                else config.thresholds.qualification
            ),
            high_score=(
                high_score_threshold
                if high_score_threshold is not None
                else config.thresholds.high_score
            ),
        )

    if enrichment_timeout_s is not None:
        config.timeouts = TimeoutConfig(
            acquisition_s=config.timeouts.acquisition_s,
            enrichment_s=enrichment_timeout_s,
            website_fetch_s=config.timeouts.website_fetch_s,
        )

    return config
