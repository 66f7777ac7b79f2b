from .engine import PollTransientError, SubmissionError, WorkflowEngineClient
from .run_contracts import (
    EngineConfig,
    LogEntry,
    MalformedStatusError,
    OutcomeKind,
    Phase,
    PhasesConfig,
    PhaseTimingConfig,
    ProgressSnapshot,
    RunHandle,
    RunOutcome,
    RunState,
    RunStatus,
    TrackerConfig,
)
from .workflow_contracts import (
    ExtractionDoneStep,
    ExtractionProcessingStep,
    InputStep,
    Notice,
    NoticeLevel,
    PaperRecord,
    ProcessingStep,
    SelectionStep,
    WorkflowStep,
)

__all__ = [
    "Phase",
    "RunHandle",
    "RunState",
    "RunStatus",
    "LogEntry",
    "MalformedStatusError",
    "OutcomeKind",
    "RunOutcome",
    "ProgressSnapshot",
    "EngineConfig",
    "PhasesConfig",
    "PhaseTimingConfig",
    "TrackerConfig",
    "WorkflowEngineClient",
    "SubmissionError",
    "PollTransientError",
    "InputStep",
    "ProcessingStep",
    "SelectionStep",
    "ExtractionProcessingStep",
    "ExtractionDoneStep",
    "WorkflowStep",
    "PaperRecord",
    "Notice",
    "NoticeLevel",
]
