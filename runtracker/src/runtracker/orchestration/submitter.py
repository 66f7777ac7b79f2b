from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from runtracker.contracts import Phase, RunHandle, SubmissionError, WorkflowEngineClient
from runtracker.orchestration.phases import describe_payload

logger = logging.getLogger("runtracker.submitter")


def utc_now() -> datetime:
    return datetime.now(UTC)


class RunSubmitter:
    """
    Issues the job-creation request for a phase and yields a RunHandle.

    Failures are fatal to the attempt: nothing is retried and no handle is kept.
    """

    def __init__(
        self,
        client: WorkflowEngineClient,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._clock = clock

    async def submit(self, phase: Phase, payload: Mapping[str, Any]) -> RunHandle:
        logger.info("Submitting %s run (%s)", phase.value, describe_payload(payload))
        try:
            response = await self._client.submit_run(phase, payload)
        except SubmissionError:
            logger.warning("Submission of %s run failed", phase.value, exc_info=True)
            raise

        run_id = _extract_run_id(response)
        if run_id is None:
            logger.warning("Submission of %s run returned no run_id", phase.value)
            raise SubmissionError(f"{phase.value} submission response did not include a run_id")

        handle = RunHandle(run_id=run_id, phase=phase, created_at=self._clock())
        logger.info("Submitted %s run %s", phase.value, run_id)
        return handle


def _extract_run_id(response: Any) -> str | None:
    if not isinstance(response, Mapping):
        return None
    value = response.get("run_id")
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, str | int):
        return None
    run_id = str(value).strip()
    return run_id or None
