from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from runtracker.contracts import PollTransientError, RunHandle, RunStatus, WorkflowEngineClient

logger = logging.getLogger("runtracker.poller")

TickHandler = Callable[[RunStatus], None]


def _current_task() -> asyncio.Task[None] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


@dataclass(slots=True)
class _CancelToken:
    run_id: str
    cancelled: bool = False


class RunPoller:
    """
    Polls one run at a fixed interval until it reaches a terminal state.

    At most one poll task is live per instance. `stop()` guarantees that no
    handler fires afterwards, even for a response already in flight.
    """

    def __init__(self, client: WorkflowEngineClient, *, interval_s: float) -> None:
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        self._client = client
        self._interval_s = interval_s
        self._task: asyncio.Task[None] | None = None
        self._token: _CancelToken | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval_s(self) -> float:
        return self._interval_s

    def start(
        self,
        handle: RunHandle,
        *,
        on_tick: TickHandler,
        on_terminal: TickHandler,
    ) -> None:
        self.stop()
        token = _CancelToken(run_id=handle.run_id)
        self._token = token
        self._task = asyncio.get_running_loop().create_task(
            self._poll_loop(handle, token, on_tick, on_terminal),
            name=f"runtracker-poll-{handle.run_id}",
        )
        logger.debug("Started polling %s every %ss", handle.run_id, self._interval_s)

    def stop(self) -> None:
        token, task = self._token, self._task
        self._token = None
        self._task = None
        if token is not None:
            token.cancelled = True
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
            logger.debug("Stopped polling %s", token.run_id if token else "<unknown>")

    async def wait(self) -> None:
        """Wait until the current poll task has finished or been cancelled."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def _poll_loop(
        self,
        handle: RunHandle,
        token: _CancelToken,
        on_tick: TickHandler,
        on_terminal: TickHandler,
    ) -> None:
        while not token.cancelled:
            await asyncio.sleep(self._interval_s)
            if token.cancelled:
                return

            try:
                status = await self._client.fetch_status(handle.run_id)
            except PollTransientError:
                logger.warning(
                    "Poll for %s failed; retrying next tick", handle.run_id, exc_info=True
                )
                continue
            except Exception:
                logger.warning(
                    "Unexpected error polling %s; retrying next tick",
                    handle.run_id,
                    exc_info=True,
                )
                continue

            # The response may arrive after stop(); drop it.
            if token.cancelled:
                return

            if status.state.is_terminal:
                self._detach(token)
                logger.info("Run %s reached %s", handle.run_id, status.state.value)
                on_terminal(status)
                return

            logger.debug("Run %s is %s", handle.run_id, status.state.value)
            on_tick(status)

    def _detach(self, token: _CancelToken) -> None:
        token.cancelled = True
        if self._token is token:
            self._token = None
            self._task = None
