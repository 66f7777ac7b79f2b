from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    # Engine reported DONE but the required outputs are missing.
    SOFT_FAILURE = "soft_failure"
    # Engine reported FAILED or TERMINATED.
    HARD_FAILURE = "hard_failure"


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """
    Resolved terminal result of a run.

    Computed once, at the tick that observes a terminal state.
    """

    kind: OutcomeKind
    sheet_url: str | None = None
    count: int | None = None
    error_message: str | None = None

    # Raw discovery table rows, empty for other phases.
    table: Sequence[Any] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    percentage: int
    stage_label: str
