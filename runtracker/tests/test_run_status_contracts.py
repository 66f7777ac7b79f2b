from datetime import UTC, datetime, timedelta, timezone

import pytest

from runtracker.contracts import LogEntry, MalformedStatusError, RunState, RunStatus
from runtracker.contracts.run_contracts.run_status import parse_timestamp


def test_run_status_from_payload_parses_all_fields():
    status = RunStatus.from_payload(
        {
            "state": "RUNNING",
            "created_ts": "2024-01-01T12:00:00Z",
            "log": [
                {"node_name": "Search Papers", "error": None, "status": "done"},
                {"node_name": "Filter", "error": "", "status": None},
            ],
            "outputs": {"paper_count": "4"},
        }
    )

    assert status.state is RunState.RUNNING
    assert status.created_at == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    assert status.log == (
        LogEntry(node_name="Search Papers", error=None, status="done"),
        LogEntry(node_name="Filter", error=None, status=None),
    )
    assert status.outputs == {"paper_count": "4"}


def test_run_status_from_payload_tolerates_missing_optional_fields():
    status = RunStatus.from_payload({"state": "started"})

    assert status.state is RunState.STARTED
    assert status.created_at is None
    assert status.log == ()
    assert status.outputs is None


@pytest.mark.parametrize("payload", [None, [], {"state": "PAUSED"}, {"log": []}])
def test_run_status_from_payload_rejects_malformed_payloads(payload):
    with pytest.raises(MalformedStatusError):
        RunStatus.from_payload(payload)


def test_terminal_states():
    assert {state for state in RunState if state.is_terminal} == {
        RunState.DONE,
        RunState.FAILED,
        RunState.TERMINATED,
    }


def test_parse_timestamp_accepts_iso_and_epoch_values():
    expected = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    assert parse_timestamp("2024-01-01T12:00:00+00:00") == expected
    assert parse_timestamp("2024-01-01T12:00:00") == expected
    assert parse_timestamp("2024-01-01T14:00:00+02:00") == expected
    assert parse_timestamp(expected.timestamp()) == expected
    assert parse_timestamp(int(expected.timestamp() * 1000)) == expected
    assert parse_timestamp(str(int(expected.timestamp()))) == expected


def test_parse_timestamp_normalizes_aware_datetimes_to_utc():
    local = datetime(2024, 1, 1, 7, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert parse_timestamp(local) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize("value", [None, "", "   ", "yesterday", True, {"ts": 1}])
def test_parse_timestamp_returns_none_for_unusable_values(value):
    assert parse_timestamp(value) is None
