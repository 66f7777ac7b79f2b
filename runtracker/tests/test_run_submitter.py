import pytest

from runtracker.contracts import Phase, RunHandle, SubmissionError
from runtracker.engine.fakes import FakeWorkflowEngineClient
from runtracker.orchestration.submitter import RunSubmitter
from runtracker.testkit.dummies import EPOCH, ManualClock


@pytest.mark.asyncio
async def test_submit_returns_handle_stamped_by_clock():
    client = FakeWorkflowEngineClient()
    client.queue_submit_response({"run_id": "r1"})
    submitter = RunSubmitter(client, clock=ManualClock())

    handle = await submitter.submit(Phase.DISCOVERY, {"keyword": "concrete", "years_back": 3})

    assert handle == RunHandle(run_id="r1", phase=Phase.DISCOVERY, created_at=EPOCH)
    assert client.calls[0].kwargs["payload"] == {"keyword": "concrete", "years_back": 3}


@pytest.mark.asyncio
async def test_submit_accepts_numeric_run_id():
    client = FakeWorkflowEngineClient()
    client.queue_submit_response({"run_id": 42})

    handle = await RunSubmitter(client).submit(Phase.EXTRACTION, {"titles": [], "links": []})

    assert handle.run_id == "42"
    assert handle.phase is Phase.EXTRACTION


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [{}, {"run_id": ""}, {"run_id": None}, {"id": "r1"}])
async def test_submit_without_run_id_is_a_submission_error(response):
    client = FakeWorkflowEngineClient()
    client.queue_submit_response(response)
    submitter = RunSubmitter(client)

    with pytest.raises(SubmissionError, match="run_id"):
        await submitter.submit(Phase.DISCOVERY, {"keyword": "k", "years_back": 1})


@pytest.mark.asyncio
async def test_submit_transport_failure_propagates_without_retry():
    client = FakeWorkflowEngineClient()
    client.queue_submit_response(SubmissionError("connection refused"))
    submitter = RunSubmitter(client)

    with pytest.raises(SubmissionError, match="connection refused"):
        await submitter.submit(Phase.DISCOVERY, {"keyword": "k", "years_back": 1})

    assert len(client.calls_named("submit_run")) == 1
