from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from runtracker.contracts.run_contracts.run_handle import Phase, RunHandle
from runtracker.contracts.run_contracts.run_outcome import ProgressSnapshot

NoticeLevel = Literal["info", "error"]

STARTING_PROGRESS = ProgressSnapshot(percentage=0, stage_label="Submitting workflow...")


@dataclass(frozen=True, slots=True)
class PaperRecord:
    paper_id: str
    title: str
    author: str = "Unknown Author"
    abstract: str = "No abstract available"
    link: str | None = None


@dataclass(frozen=True, slots=True)
class Notice:
    """User-visible message published on a workflow transition."""

    title: str
    description: str
    level: NoticeLevel = "info"


@dataclass(frozen=True, slots=True)
class InputStep:
    name: Literal["input"] = "input"


@dataclass(frozen=True, slots=True)
class ProcessingStep:
    handle: RunHandle
    progress: ProgressSnapshot = STARTING_PROGRESS
    keyword: str = ""
    years_back: int = 0
    name: Literal["processing"] = "processing"

    @property
    def phase(self) -> Phase:
        return self.handle.phase


@dataclass(frozen=True, slots=True)
class SelectionStep:
    paper_count: int
    table: Sequence[Any] = field(default_factory=tuple)
    papers: Sequence[PaperRecord] = field(default_factory=tuple)
    sheet_url: str | None = None
    name: Literal["selection"] = "selection"


@dataclass(frozen=True, slots=True)
class ExtractionProcessingStep:
    handle: RunHandle
    selection: Sequence[PaperRecord]
    previous: SelectionStep
    progress: ProgressSnapshot = STARTING_PROGRESS
    name: Literal["extraction_processing"] = "extraction_processing"


@dataclass(frozen=True, slots=True)
class ExtractionDoneStep:
    sheet_url: str
    selection: Sequence[PaperRecord]
    count: int | None = None
    name: Literal["extraction_done"] = "extraction_done"


WorkflowStep = (
    InputStep | ProcessingStep | SelectionStep | ExtractionProcessingStep | ExtractionDoneStep
)
