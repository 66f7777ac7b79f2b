from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Epoch values above this are treated as milliseconds.
_EPOCH_MILLIS_THRESHOLD = 10_000_000_000


class RunState(str, Enum):
    STARTED = "STARTED"
    RUNNING = "RUNNING"
    DONE = "DONE"
    FAILED = "FAILED"
    TERMINATED = "TERMINATED"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.DONE, RunState.FAILED, RunState.TERMINATED)


class MalformedStatusError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class LogEntry:
    node_name: str | None = None
    error: str | None = None
    status: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> LogEntry:
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            node_name=_optional_str(payload.get("node_name")),
            error=_optional_str(payload.get("error")),
            status=_optional_str(payload.get("status")),
        )


@dataclass(frozen=True, slots=True)
class RunStatus:
    """
    One poll response from the remote engine.

    `log` is ordered oldest first; the last entry is the current activity.
    """

    state: RunState
    created_at: datetime | None = None
    log: Sequence[LogEntry] = field(default_factory=tuple)
    outputs: Mapping[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> RunStatus:
        if not isinstance(payload, Mapping):
            raise MalformedStatusError("status response must be a JSON object")

        raw_state = payload.get("state")
        try:
            state = RunState(str(raw_state).upper())
        except ValueError as exc:
            raise MalformedStatusError(f"unknown run state: {raw_state!r}") from exc

        raw_log = payload.get("log")
        entries: tuple[LogEntry, ...] = ()
        if isinstance(raw_log, list):
            entries = tuple(LogEntry.from_payload(item) for item in raw_log)

        raw_outputs = payload.get("outputs")
        outputs = dict(raw_outputs) if isinstance(raw_outputs, Mapping) else None

        return cls(
            state=state,
            created_at=parse_timestamp(payload.get("created_ts")),
            log=entries,
            outputs=outputs,
        )


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch number into an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, int | float):
        return _from_epoch(float(value))
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return _from_epoch(float(text))
    except ValueError:
        pass
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _from_epoch(seconds: float) -> datetime | None:
    if seconds > _EPOCH_MILLIS_THRESHOLD:
        seconds = seconds / 1000.0
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None
