from .steps import (
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
