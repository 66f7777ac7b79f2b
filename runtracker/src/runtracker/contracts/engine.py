from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from runtracker.contracts.run_contracts.run_handle import Phase
from runtracker.contracts.run_contracts.run_status import RunStatus


class SubmissionError(RuntimeError):
    pass


class PollTransientError(RuntimeError):
    pass


@runtime_checkable
class WorkflowEngineClient(Protocol):
    """
    Facade contract for the remote workflow engine.
    """

    async def submit_run(self, phase: Phase, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Create a run for the phase and return the decoded response body.

        Raises SubmissionError when the transport call does not succeed.
        """
        ...

    async def fetch_status(self, run_id: str) -> RunStatus:
        """
        Fetch the current status of a run.

        Raises PollTransientError when the transport call does not succeed.
        """
        ...
