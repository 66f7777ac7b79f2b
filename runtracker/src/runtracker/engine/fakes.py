from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from runtracker.contracts import Phase, PollTransientError, RunStatus


@dataclass(frozen=True, slots=True)
class EngineCall:
    """Record of an engine call for assertions in tests."""

    name: str
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


class FakeWorkflowEngineClient:
    """
    In-memory WorkflowEngineClient for unit tests.

    Poll responses are scripted per run id. Each scripted item is a RunStatus,
    a raw status payload, or an exception instance to raise. The last scripted
    item repeats once the script is exhausted.
    """

    def __init__(self) -> None:
        self._run_counter = 0
        self._calls: list[EngineCall] = []
        self._scripts: dict[str, deque[Any]] = {}
        self._last: dict[str, Any] = {}
        self._submit_responses: deque[Any] = deque()

    @property
    def calls(self) -> list[EngineCall]:
        """Return the recorded calls in order."""
        return list(self._calls)

    def calls_named(self, name: str) -> list[EngineCall]:
        return [call for call in self._calls if call.name == name]

    def queue_submit_response(self, response: Mapping[str, Any] | Exception) -> None:
        """Override the next submit_run result instead of generating a run id."""
        self._submit_responses.append(response)

    def script_statuses(self, run_id: str, statuses: Iterable[Any]) -> None:
        self._scripts.setdefault(run_id, deque()).extend(statuses)

    async def submit_run(self, phase: Phase, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """Create a fake run and return its response body."""
        self._record("submit_run", phase=phase, payload=dict(payload))
        if self._submit_responses:
            response = self._submit_responses.popleft()
            if isinstance(response, Exception):
                raise response
            return dict(response)
        self._run_counter += 1
        return {"run_id": f"run_{self._run_counter}"}

    async def fetch_status(self, run_id: str) -> RunStatus:
        """Return the next scripted status for the run."""
        self._record("fetch_status", run_id=run_id)
        script = self._scripts.get(run_id)
        if script:
            item = script.popleft()
            self._last[run_id] = item
        elif run_id in self._last:
            item = self._last[run_id]
        else:
            raise PollTransientError(f"No scripted status for run {run_id}")

        if isinstance(item, Exception):
            raise item
        if isinstance(item, RunStatus):
            return item
        return RunStatus.from_payload(item)

    def _record(self, name: str, **kwargs: Any) -> None:
        self._calls.append(EngineCall(name=name, args=(), kwargs=kwargs))
