from __future__ import annotations

from datetime import datetime

from runtracker.contracts import RunState

STARTED_PERCENT = 10
RUNNING_FLOOR_PERCENT = 10
# The last 10% is held back until the engine reports DONE.
RUNNING_CEILING_PERCENT = 90
RUNNING_UNKNOWN_START_PERCENT = 20
DONE_PERCENT = 100


def estimate(
    state: RunState,
    created_at: datetime | None,
    now: datetime,
    window_s: float,
) -> int:
    """
    Estimate run progress as a 0-100 percentage.

    The engine exposes no fractional progress, so elapsed wall-clock time
    against the phase's expected duration stands in for it while running.
    """
    if state is RunState.STARTED:
        return STARTED_PERCENT
    if state is RunState.DONE:
        return DONE_PERCENT
    if state is not RunState.RUNNING:
        raise ValueError(f"No progress estimate for state {state.value}")

    if created_at is None:
        return RUNNING_UNKNOWN_START_PERCENT
    if window_s <= 0:
        raise ValueError("window_s must be > 0")

    elapsed_s = (now - created_at).total_seconds()
    raw = RUNNING_FLOOR_PERCENT + (elapsed_s / window_s) * RUNNING_CEILING_PERCENT
    clamped = max(RUNNING_FLOOR_PERCENT, min(raw, RUNNING_CEILING_PERCENT))
    return int(round(clamped))
