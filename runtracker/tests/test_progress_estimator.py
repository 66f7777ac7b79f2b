from datetime import timedelta

import pytest

from runtracker.contracts import RunState
from runtracker.runtime.progress import estimate
from runtracker.testkit.dummies import EPOCH


def test_started_is_fixed_ten_percent():
    assert estimate(RunState.STARTED, EPOCH, EPOCH + timedelta(hours=1), 30.0) == 10
    assert estimate(RunState.STARTED, None, EPOCH, 30.0) == 10


def test_done_is_always_complete():
    assert estimate(RunState.DONE, EPOCH, EPOCH, 30.0) == 100
    assert estimate(RunState.DONE, None, EPOCH + timedelta(days=3), 0.5) == 100


def test_running_uses_elapsed_fraction_of_window():
    now = EPOCH + timedelta(seconds=15)

    assert estimate(RunState.RUNNING, EPOCH, now, 30.0) == 55


def test_running_without_creation_time_uses_fallback():
    assert estimate(RunState.RUNNING, None, EPOCH, 30.0) == 20


def test_running_stays_within_bounds_and_never_decreases():
    previous = 0
    for seconds in range(-10, 120, 3):
        value = estimate(RunState.RUNNING, EPOCH, EPOCH + timedelta(seconds=seconds), 30.0)
        assert 10 <= value <= 90
        assert value >= previous
        previous = value
    assert previous == 90


@pytest.mark.parametrize("state", [RunState.FAILED, RunState.TERMINATED])
def test_failure_states_are_not_estimated(state):
    with pytest.raises(ValueError):
        estimate(state, EPOCH, EPOCH, 30.0)


def test_running_rejects_non_positive_window():
    with pytest.raises(ValueError, match="window_s"):
        estimate(RunState.RUNNING, EPOCH, EPOCH, 0.0)
