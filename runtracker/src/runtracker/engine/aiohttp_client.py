from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from runtracker.contracts import (
    EngineConfig,
    MalformedStatusError,
    Phase,
    PollTransientError,
    RunStatus,
    SubmissionError,
)

logger = logging.getLogger("runtracker.engine")


class AiohttpWorkflowEngineClient:
    """
    aiohttp-backed implementation of the WorkflowEngineClient facade.

    A session passed in by the caller is used as-is and never closed here.
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> AiohttpWorkflowEngineClient:
        self._ensure_session()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def submit_run(self, phase: Phase, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        url = self._submit_url(phase)
        session = self._ensure_session()
        try:
            async with session.post(url, json=dict(payload), headers=self._headers()) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise SubmissionError(
                        f"{phase.value} submission rejected: HTTP {response.status}: {body[:200]}"
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SubmissionError(f"{phase.value} submission failed: {exc}") from exc
        except (json.JSONDecodeError, ValueError) as exc:
            raise SubmissionError(f"{phase.value} submission returned invalid JSON") from exc

        if not isinstance(data, Mapping):
            raise SubmissionError(f"{phase.value} submission returned a non-object body")
        logger.debug("Submitted %s run to %s", phase.value, url)
        return data

    async def fetch_status(self, run_id: str) -> RunStatus:
        session = self._ensure_session()
        params = {"run_id": run_id, "user_id": self._config.user_id}
        try:
            async with session.get(
                self._config.status_url, params=params, headers=self._headers()
            ) as response:
                if response.status >= 400:
                    raise PollTransientError(
                        f"status poll for {run_id} failed: HTTP {response.status}"
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise PollTransientError(f"status poll for {run_id} failed: {exc}") from exc
        except (json.JSONDecodeError, ValueError) as exc:
            raise PollTransientError(f"status poll for {run_id} returned invalid JSON") from exc

        try:
            return RunStatus.from_payload(data)
        except MalformedStatusError as exc:
            raise PollTransientError(f"status poll for {run_id}: {exc}") from exc

    def _submit_url(self, phase: Phase) -> str:
        if phase is Phase.DISCOVERY:
            return self._config.discovery_url
        return self._config.extraction_url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.token}",
            "Accept": "application/json",
        }

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session
