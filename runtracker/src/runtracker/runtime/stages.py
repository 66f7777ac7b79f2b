from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from runtracker.contracts import LogEntry, Phase

DEFAULT_STAGE_LABEL = "Workflow starting..."
GENERIC_STAGE_LABEL = "Processing..."


@dataclass(frozen=True, slots=True)
class StageRule:
    keyword: str
    label: str


# Order matters: the first keyword contained in the node name wins.
DISCOVERY_STAGES: tuple[StageRule, ...] = (
    StageRule("search", "Searching academic databases..."),
    StageRule("scrape", "Collecting paper metadata..."),
    StageRule("fetch", "Collecting paper metadata..."),
    StageRule("filter", "Filtering by publication date..."),
    StageRule("dedup", "Removing duplicate papers..."),
    StageRule("sheet", "Writing results to the sheet..."),
    StageRule("compile", "Compiling results..."),
)

EXTRACTION_STAGES: tuple[StageRule, ...] = (
    StageRule("download", "Downloading papers..."),
    StageRule("pdf", "Reading paper PDFs..."),
    StageRule("parse", "Parsing documents..."),
    StageRule("extract", "Extracting data..."),
    StageRule("analy", "Analyzing content..."),
    StageRule("summar", "Summarizing findings..."),
    StageRule("sheet", "Writing the analysis sheet..."),
    StageRule("compile", "Compiling results..."),
)


def stages_for(phase: Phase) -> tuple[StageRule, ...]:
    if phase is Phase.DISCOVERY:
        return DISCOVERY_STAGES
    return EXTRACTION_STAGES


def classify(log: Sequence[LogEntry], rules: Sequence[StageRule]) -> str:
    """Derive a human-readable activity label from the most recent log entry."""
    if not log:
        return DEFAULT_STAGE_LABEL

    node_name = log[-1].node_name
    if not node_name:
        return GENERIC_STAGE_LABEL

    lowered = node_name.lower()
    for rule in rules:
        if rule.keyword in lowered:
            return rule.label
    return GENERIC_STAGE_LABEL
