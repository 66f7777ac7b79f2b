from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Phase(str, Enum):
    DISCOVERY = "discovery"
    EXTRACTION = "extraction"


@dataclass(frozen=True, slots=True)
class RunHandle:
    """
    Identity of one submitted run on the remote workflow engine.

    Owned by the orchestrator for the lifetime of the run.
    """

    run_id: str
    phase: Phase
    created_at: datetime
