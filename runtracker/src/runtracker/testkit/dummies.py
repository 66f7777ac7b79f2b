from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from runtracker.contracts import EngineConfig, PhasesConfig, PhaseTimingConfig, TrackerConfig

EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


def status_payload(
    state: str,
    *,
    created_ts: Any = None,
    log: Sequence[Mapping[str, Any]] | None = None,
    outputs: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"state": state, "log": list(log or [])}
    if created_ts is not None:
        if isinstance(created_ts, datetime):
            created_ts = created_ts.isoformat()
        payload["created_ts"] = created_ts
    if outputs is not None:
        payload["outputs"] = dict(outputs)
    return payload


def dummy_tracker_config(*, poll_interval_s: float = 0.0) -> TrackerConfig:
    timing = PhaseTimingConfig(
        poll_interval_s=max(poll_interval_s, 1e-6),
        expected_duration_s=30.0,
    )
    return TrackerConfig(
        engine=EngineConfig(
            discovery_url="https://engine.test/discovery",
            extraction_url="https://engine.test/extraction",
            status_url="https://engine.test/status",
            token="test-token",
            user_id="user-1",
        ),
        phases=PhasesConfig(discovery=timing, extraction=timing.model_copy()),
    )
