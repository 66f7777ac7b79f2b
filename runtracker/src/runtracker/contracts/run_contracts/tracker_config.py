from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discovery_url: str = Field(min_length=1)
    extraction_url: str = Field(min_length=1)
    status_url: str = Field(min_length=1)
    token: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    request_timeout_s: float = Field(default=30.0, gt=0)

    @field_validator("discovery_url", "extraction_url", "status_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value


class PhaseTimingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    poll_interval_s: float = Field(gt=0)
    # Expected run duration used to turn elapsed time into a percentage.
    expected_duration_s: float = Field(gt=0)


def _discovery_timing() -> PhaseTimingConfig:
    return PhaseTimingConfig(poll_interval_s=2.0, expected_duration_s=30.0)


def _extraction_timing() -> PhaseTimingConfig:
    return PhaseTimingConfig(poll_interval_s=10.0, expected_duration_s=300.0)


class PhasesConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discovery: PhaseTimingConfig = Field(default_factory=_discovery_timing)
    extraction: PhaseTimingConfig = Field(default_factory=_extraction_timing)


class TrackerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    engine: EngineConfig
    phases: PhasesConfig = Field(default_factory=PhasesConfig)
