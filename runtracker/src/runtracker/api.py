from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime
from functools import partial
from typing import Any

from runtracker.contracts import (
    ExtractionDoneStep,
    ExtractionProcessingStep,
    InputStep,
    Notice,
    NoticeLevel,
    OutcomeKind,
    PaperRecord,
    Phase,
    ProcessingStep,
    ProgressSnapshot,
    RunHandle,
    RunOutcome,
    RunState,
    RunStatus,
    SelectionStep,
    SubmissionError,
    TrackerConfig,
    WorkflowEngineClient,
    WorkflowStep,
)
from runtracker.orchestration.phases import (
    DictPhaseRegistry,
    discovery_payload,
    extraction_payload,
)
from runtracker.orchestration.poller import RunPoller
from runtracker.orchestration.submitter import RunSubmitter, utc_now
from runtracker.runtime.outputs import resolve_outcome
from runtracker.runtime.papers import parse_paper_rows
from runtracker.runtime.progress import estimate
from runtracker.runtime.stages import classify

logger = logging.getLogger("runtracker.workflow")

StepListener = Callable[[WorkflowStep], None]

COMPLETE_PROGRESS = ProgressSnapshot(percentage=100, stage_label="Complete")


class InputValidationError(ValueError):
    pass


class WorkflowStateError(RuntimeError):
    pass


def validate_discovery_params(keyword: Any, years_back: Any) -> tuple[str, int]:
    errors: list[str] = []

    keyword_text = keyword.strip() if isinstance(keyword, str) else ""
    if not keyword_text:
        errors.append("topic keyword must be a non-empty string")

    years = 0
    if isinstance(years_back, int) and not isinstance(years_back, bool):
        years = years_back
    elif isinstance(years_back, str) and years_back.strip().isdigit():
        years = int(years_back.strip())

    if years_back is None or (isinstance(years_back, str) and not years_back.strip()):
        errors.append("time range (years back) is required")
    elif years <= 0:
        errors.append("years back must be a positive integer")

    if errors:
        raise InputValidationError("; ".join(errors))
    return keyword_text, years


def validate_selection(papers: Sequence[PaperRecord] | None) -> tuple[PaperRecord, ...]:
    selection = tuple(papers or ())
    if not selection:
        raise InputValidationError("at least one paper must be selected")
    untitled = [paper.paper_id for paper in selection if not paper.title.strip()]
    if untitled:
        raise InputValidationError(f"selected papers without a title: {untitled}")
    return selection


class WorkflowOrchestrator:
    """
    Two-phase paper workflow: discovery run, paper selection, extraction run.

    Owns the current WorkflowStep, one RunPoller per phase, and every
    transition between steps. Listeners are told about each new step.
    """

    def __init__(
        self,
        client: WorkflowEngineClient,
        *,
        phases: DictPhaseRegistry,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._phases = phases
        self._clock = clock
        self._submitter = RunSubmitter(client, clock=clock)
        self._pollers: dict[Phase, RunPoller] = {
            phase: RunPoller(client, interval_s=phases.get(phase).poll_interval_s)
            for phase in Phase
        }
        self._step: WorkflowStep = InputStep()
        self._progress: ProgressSnapshot | None = None
        self._last_outcome: RunOutcome | None = None
        self._notices: list[Notice] = []
        self._listeners: list[StepListener] = []
        self._generation = 0
        self._submitting = False

    @classmethod
    def from_config(
        cls, config: TrackerConfig, client: WorkflowEngineClient
    ) -> WorkflowOrchestrator:
        return cls(client, phases=DictPhaseRegistry.from_config(config))

    @property
    def step(self) -> WorkflowStep:
        return self._step

    @property
    def progress(self) -> ProgressSnapshot | None:
        """Latest progress snapshot of the active run, if any."""
        return self._progress

    @property
    def last_outcome(self) -> RunOutcome | None:
        return self._last_outcome

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    def is_polling(self, phase: Phase) -> bool:
        return self._pollers[phase].active

    def subscribe(self, listener: StepListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def submit_discovery(self, keyword: Any, years_back: Any) -> RunHandle:
        self._require_step(InputStep, "submit a search")
        try:
            keyword_text, years = validate_discovery_params(keyword, years_back)
        except InputValidationError as exc:
            self._notify("Missing Information", str(exc), level="error")
            raise

        handle = await self._submit(
            Phase.DISCOVERY,
            discovery_payload(keyword_text, years),
            fallback=InputStep(),
        )
        if handle is None:
            raise WorkflowStateError("Workflow was reset while the search was being submitted")

        step = ProcessingStep(handle=handle, keyword=keyword_text, years_back=years)
        self._progress = step.progress
        self._transition(step)
        self._pollers[Phase.DISCOVERY].start(
            handle,
            on_tick=partial(self._on_tick, handle),
            on_terminal=partial(self._on_discovery_terminal, handle),
        )
        return handle

    async def select_papers(self, papers: Sequence[PaperRecord] | None) -> RunHandle:
        current = self._require_step(SelectionStep, "select papers")
        try:
            selection = validate_selection(papers)
        except InputValidationError as exc:
            self._notify("No Papers Selected", str(exc), level="error")
            raise

        handle = await self._submit(
            Phase.EXTRACTION,
            extraction_payload(selection),
            fallback=current,
        )
        if handle is None:
            raise WorkflowStateError("Workflow was reset while the extraction was being submitted")

        step = ExtractionProcessingStep(handle=handle, selection=selection, previous=current)
        self._progress = step.progress
        self._transition(step)
        self._pollers[Phase.EXTRACTION].start(
            handle,
            on_tick=partial(self._on_tick, handle),
            on_terminal=partial(self._on_extraction_terminal, handle),
        )
        return handle

    def reset(self) -> None:
        for poller in self._pollers.values():
            poller.stop()
        self._generation += 1
        self._submitting = False
        self._progress = None
        self._last_outcome = None
        logger.info("Workflow reset")
        self._transition(InputStep())

    async def wait_for_runs(self) -> None:
        """Wait until no poller has a live task."""
        await asyncio.gather(*(poller.wait() for poller in self._pollers.values()))

    async def _submit(
        self,
        phase: Phase,
        payload: dict[str, Any],
        *,
        fallback: WorkflowStep,
    ) -> RunHandle | None:
        if self._submitting:
            raise WorkflowStateError("A submission is already in progress")

        self._pollers[phase].stop()
        generation = self._generation
        self._submitting = True
        try:
            handle = await self._submitter.submit(phase, payload)
        except SubmissionError as exc:
            if generation == self._generation:
                self._notify("Submission Failed", str(exc), level="error")
                self._transition(fallback)
            raise
        finally:
            if generation == self._generation:
                self._submitting = False

        if generation != self._generation:
            logger.info("Discarding %s run %s submitted before reset", phase.value, handle.run_id)
            return None
        return handle

    def _on_tick(self, handle: RunHandle, status: RunStatus) -> None:
        if not self._is_active(handle):
            return

        profile = self._phases.get(handle.phase)
        snapshot = ProgressSnapshot(
            percentage=estimate(
                status.state,
                status.created_at,
                self._clock(),
                profile.expected_duration_s,
            ),
            stage_label=classify(status.log, profile.stages),
        )
        self._progress = snapshot
        self._transition(replace(self._step, progress=snapshot))

    def _on_discovery_terminal(self, handle: RunHandle, status: RunStatus) -> None:
        if not self._is_active(handle):
            return
        step = self._step
        assert isinstance(step, ProcessingStep)

        outcome = resolve_outcome(Phase.DISCOVERY, status)
        self._last_outcome = outcome
        if outcome.ok:
            self._progress = COMPLETE_PROGRESS
            assert outcome.count is not None
            papers = parse_paper_rows(outcome.table)
            self._notify(
                "Research Papers Found!",
                f"Found {outcome.count} papers for '{step.keyword}'. Select papers to analyze.",
            )
            self._transition(
                SelectionStep(
                    paper_count=outcome.count,
                    table=outcome.table,
                    papers=tuple(papers),
                    sheet_url=outcome.sheet_url,
                )
            )
            return

        self._progress = None
        self._notify_failure(outcome, status)
        self._transition(InputStep())

    def _on_extraction_terminal(self, handle: RunHandle, status: RunStatus) -> None:
        if not self._is_active(handle):
            return
        step = self._step
        assert isinstance(step, ExtractionProcessingStep)

        outcome = resolve_outcome(Phase.EXTRACTION, status)
        self._last_outcome = outcome
        if outcome.ok:
            self._progress = COMPLETE_PROGRESS
            assert outcome.sheet_url is not None
            self._notify("Analysis Complete!", "Your research data analysis is ready.")
            self._transition(
                ExtractionDoneStep(
                    sheet_url=outcome.sheet_url,
                    selection=step.selection,
                    count=outcome.count,
                )
            )
            return

        self._progress = None
        self._notify_failure(outcome, status)
        self._transition(step.previous)

    def _notify_failure(self, outcome: RunOutcome, status: RunStatus) -> None:
        if outcome.kind is OutcomeKind.SOFT_FAILURE:
            self._notify(
                "Incomplete Results",
                f"The workflow finished but the results were incomplete. {outcome.error_message}",
                level="error",
            )
            return
        title = "Workflow Terminated" if status.state is RunState.TERMINATED else "Workflow Failed"
        self._notify(title, outcome.error_message or "", level="error")

    def _is_active(self, handle: RunHandle) -> bool:
        step = self._step
        if not isinstance(step, ProcessingStep | ExtractionProcessingStep):
            return False
        return step.handle == handle

    def _require_step(self, step_type: type, action: str) -> Any:
        if not isinstance(self._step, step_type):
            raise WorkflowStateError(f"Cannot {action} while in step '{self._step.name}'")
        return self._step

    def _notify(self, title: str, description: str, *, level: NoticeLevel = "info") -> None:
        notice = Notice(title=title, description=description, level=level)
        self._notices.append(notice)
        log = logger.warning if level == "error" else logger.info
        log("%s: %s", title, description)

    def _transition(self, step: WorkflowStep) -> None:
        previous = self._step
        self._step = step
        if previous.name != step.name:
            logger.info("Workflow step %s -> %s", previous.name, step.name)
        for listener in list(self._listeners):
            try:
                listener(step)
            except Exception:
                logger.warning("Workflow listener failed on step %s", step.name, exc_info=True)
