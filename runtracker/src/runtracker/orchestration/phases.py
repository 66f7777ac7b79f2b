from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from runtracker.configuration import phase_timing
from runtracker.contracts import PaperRecord, Phase, TrackerConfig
from runtracker.runtime.stages import StageRule, stages_for


@dataclass(frozen=True, slots=True)
class PhaseProfile:
    phase: Phase
    poll_interval_s: float
    expected_duration_s: float
    stages: tuple[StageRule, ...]


@dataclass
class DictPhaseRegistry:
    profiles: dict[Phase, PhaseProfile]

    def get(self, phase: Phase) -> PhaseProfile:
        try:
            return self.profiles[phase]
        except KeyError as e:
            raise KeyError(f"No profile registered for phase {phase.value}") from e

    @classmethod
    def from_config(cls, config: TrackerConfig) -> DictPhaseRegistry:
        profiles = {}
        for phase in Phase:
            timing = phase_timing(config, phase)
            profiles[phase] = PhaseProfile(
                phase=phase,
                poll_interval_s=timing.poll_interval_s,
                expected_duration_s=timing.expected_duration_s,
                stages=stages_for(phase),
            )
        return cls(profiles=profiles)


def discovery_payload(keyword: str, years_back: int) -> dict[str, Any]:
    return {"keyword": keyword, "years_back": years_back}


def extraction_payload(papers: Sequence[PaperRecord]) -> dict[str, Any]:
    # titles and links stay index-aligned; a missing link is sent as "".
    return {
        "titles": [paper.title for paper in papers],
        "links": [paper.link or "" for paper in papers],
    }


def describe_payload(payload: Mapping[str, Any]) -> str:
    tokens = []
    for key in sorted(payload.keys()):
        value = payload[key]
        if isinstance(value, list):
            tokens.append(f"{key}=[{len(value)}]")
        else:
            tokens.append(f"{key}={value}")
    return ",".join(tokens)
