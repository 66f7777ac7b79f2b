import pytest

from runtracker.contracts import (
    Phase,
    PollTransientError,
    RunState,
    RunStatus,
    SubmissionError,
    WorkflowEngineClient,
)
from runtracker.engine.fakes import FakeWorkflowEngineClient
from runtracker.testkit.dummies import status_payload


def test_fake_client_satisfies_protocol():
    assert isinstance(FakeWorkflowEngineClient(), WorkflowEngineClient)


@pytest.mark.asyncio
async def test_fake_client_records_calls_in_order():
    client = FakeWorkflowEngineClient()

    first = await client.submit_run(Phase.DISCOVERY, {"keyword": "concrete", "years_back": 3})
    second = await client.submit_run(Phase.EXTRACTION, {"titles": ["t"], "links": ["l"]})
    client.script_statuses("run_1", [status_payload("STARTED")])
    await client.fetch_status("run_1")

    assert first == {"run_id": "run_1"}
    assert second == {"run_id": "run_2"}
    assert [call.name for call in client.calls] == ["submit_run", "submit_run", "fetch_status"]
    assert client.calls[0].kwargs["phase"] is Phase.DISCOVERY
    assert client.calls[0].kwargs["payload"] == {"keyword": "concrete", "years_back": 3}
    assert client.calls_named("fetch_status")[0].kwargs == {"run_id": "run_1"}


@pytest.mark.asyncio
async def test_fake_client_replays_script_then_repeats_last_item():
    client = FakeWorkflowEngineClient()
    client.script_statuses(
        "r1",
        [
            status_payload("STARTED"),
            RunStatus(state=RunState.RUNNING),
        ],
    )

    assert (await client.fetch_status("r1")).state is RunState.STARTED
    assert (await client.fetch_status("r1")).state is RunState.RUNNING
    assert (await client.fetch_status("r1")).state is RunState.RUNNING


@pytest.mark.asyncio
async def test_fake_client_raises_scripted_errors():
    client = FakeWorkflowEngineClient()
    client.script_statuses("r1", [PollTransientError("flaky")])
    client.queue_submit_response(SubmissionError("down"))
    client.queue_submit_response({"status": "accepted"})

    with pytest.raises(PollTransientError, match="flaky"):
        await client.fetch_status("r1")
    with pytest.raises(SubmissionError, match="down"):
        await client.submit_run(Phase.DISCOVERY, {})
    assert await client.submit_run(Phase.DISCOVERY, {}) == {"status": "accepted"}


@pytest.mark.asyncio
async def test_fake_client_unscripted_run_is_a_transient_error():
    client = FakeWorkflowEngineClient()

    with pytest.raises(PollTransientError, match="No scripted status"):
        await client.fetch_status("unknown")
