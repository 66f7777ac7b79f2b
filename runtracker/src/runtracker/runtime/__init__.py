"""Pure helpers that interpret run status and outputs."""

from runtracker.runtime.outputs import (
    ITEM_COUNT,
    SHEET_URL,
    TABLE_PAYLOAD,
    OutputField,
    extract_error_message,
    resolve,
    resolve_field,
    resolve_outcome,
)
from runtracker.runtime.papers import parse_paper_rows
from runtracker.runtime.progress import estimate
from runtracker.runtime.stages import (
    DISCOVERY_STAGES,
    EXTRACTION_STAGES,
    StageRule,
    classify,
    stages_for,
)

__all__ = [
    "OutputField",
    "SHEET_URL",
    "ITEM_COUNT",
    "TABLE_PAYLOAD",
    "resolve",
    "resolve_field",
    "resolve_outcome",
    "extract_error_message",
    "estimate",
    "StageRule",
    "DISCOVERY_STAGES",
    "EXTRACTION_STAGES",
    "classify",
    "stages_for",
    "parse_paper_rows",
]
