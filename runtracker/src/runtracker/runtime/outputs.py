from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from runtracker.contracts import LogEntry, OutcomeKind, Phase, RunOutcome, RunState, RunStatus

GENERIC_FAILURE_MESSAGE = "The workflow failed without reporting an error."


@dataclass(frozen=True, slots=True)
class OutputField:
    """
    A logical output and the bag keys that may carry it, in priority order.

    The engine's output key naming is not fixed, so each field lists every
    key name it has been observed under.
    """

    name: str
    candidate_keys: tuple[str, ...]
    coerce: Callable[[Any], Any] | None = None


def _coerce_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            return int(number) if number.is_integer() else None
    return None


def _coerce_table(value: Any) -> tuple[Any, ...] | None:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return None
    if isinstance(value, list | tuple):
        return tuple(value) if value else None
    return None


def _coerce_url(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


SHEET_URL = OutputField(
    name="sheet_url",
    candidate_keys=(
        "google_sheet_url",
        "sheet_url",
        "results_url",
        "output_url",
        "analysis_sheet_url",
    ),
    coerce=_coerce_url,
)
ITEM_COUNT = OutputField(
    name="item_count",
    candidate_keys=("paper_count", "count", "total_papers", "results_count"),
    coerce=_coerce_count,
)
TABLE_PAYLOAD = OutputField(
    name="table_payload",
    candidate_keys=("table_content",),
    coerce=_coerce_table,
)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Mapping | list | tuple | set):
        return len(value) == 0
    return False


def resolve(outputs: Mapping[str, Any] | None, candidate_keys: Sequence[str]) -> Any | None:
    """Return the first present, non-empty value among `candidate_keys`."""
    if not outputs:
        return None
    for key in candidate_keys:
        if key not in outputs:
            continue
        value = outputs[key]
        if not is_empty(value):
            return value
    return None


def resolve_field(outputs: Mapping[str, Any] | None, output_field: OutputField) -> Any | None:
    if output_field.coerce is None:
        return resolve(outputs, output_field.candidate_keys)
    # A value that cannot be coerced does not shadow lower-priority keys.
    for key in output_field.candidate_keys:
        value = resolve(outputs, (key,))
        if value is None:
            continue
        coerced = output_field.coerce(value)
        if coerced is not None:
            return coerced
    return None


def extract_error_message(log: Sequence[LogEntry]) -> str:
    for entry in log:
        if entry.error:
            return entry.error
        if entry.status and entry.status.strip().lower() == "failed":
            if entry.node_name:
                return f"Step '{entry.node_name}' failed."
            return GENERIC_FAILURE_MESSAGE
    return GENERIC_FAILURE_MESSAGE


def resolve_outcome(phase: Phase, status: RunStatus) -> RunOutcome:
    if not status.state.is_terminal:
        raise ValueError(f"Cannot resolve an outcome for non-terminal state {status.state.value}")

    if status.state is not RunState.DONE:
        return RunOutcome(
            kind=OutcomeKind.HARD_FAILURE,
            error_message=extract_error_message(status.log),
        )

    outputs = status.outputs
    sheet_url = resolve_field(outputs, SHEET_URL)
    count = resolve_field(outputs, ITEM_COUNT)

    if phase is Phase.DISCOVERY:
        table = resolve_field(outputs, TABLE_PAYLOAD)
        if table is None or count is None:
            return RunOutcome(
                kind=OutcomeKind.SOFT_FAILURE,
                sheet_url=sheet_url,
                count=count,
                error_message="The search finished but did not return a paper table and count.",
            )
        return RunOutcome(kind=OutcomeKind.SUCCESS, sheet_url=sheet_url, count=count, table=table)

    if sheet_url is None:
        return RunOutcome(
            kind=OutcomeKind.SOFT_FAILURE,
            count=count,
            error_message="The extraction finished but did not return a results sheet URL.",
        )
    return RunOutcome(kind=OutcomeKind.SUCCESS, sheet_url=sheet_url, count=count)
