from .run_handle import Phase, RunHandle
from .run_outcome import OutcomeKind, ProgressSnapshot, RunOutcome
from .run_status import LogEntry, MalformedStatusError, RunState, RunStatus, parse_timestamp
from .tracker_config import EngineConfig, PhasesConfig, PhaseTimingConfig, TrackerConfig

__all__ = [
    "Phase",
    "RunHandle",
    "RunState",
    "RunStatus",
    "LogEntry",
    "MalformedStatusError",
    "parse_timestamp",
    "OutcomeKind",
    "RunOutcome",
    "ProgressSnapshot",
    "EngineConfig",
    "PhasesConfig",
    "PhaseTimingConfig",
    "TrackerConfig",
]
