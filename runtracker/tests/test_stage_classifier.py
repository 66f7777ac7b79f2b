from runtracker.contracts import LogEntry, Phase
from runtracker.runtime.stages import (
    DEFAULT_STAGE_LABEL,
    DISCOVERY_STAGES,
    EXTRACTION_STAGES,
    GENERIC_STAGE_LABEL,
    classify,
    stages_for,
)


def test_classify_empty_log_returns_default_label():
    assert classify([], DISCOVERY_STAGES) == DEFAULT_STAGE_LABEL


def test_classify_uses_last_entry():
    log = [LogEntry(node_name="compile"), LogEntry(node_name="ExtractStep")]

    assert classify(log, EXTRACTION_STAGES) == "Extracting data..."


def test_classify_is_case_insensitive():
    upper = classify([LogEntry(node_name="ExtractStep")], EXTRACTION_STAGES)
    lower = classify([LogEntry(node_name="extractstep")], EXTRACTION_STAGES)

    assert upper == lower == "Extracting data..."


def test_classify_first_matching_rule_wins():
    # "download" precedes "extract" in the extraction table.
    log = [LogEntry(node_name="extract_after_download")]

    assert classify(log, EXTRACTION_STAGES) == "Downloading papers..."


def test_classify_without_match_or_node_name_returns_generic_label():
    assert classify([LogEntry(node_name="mystery")], DISCOVERY_STAGES) == GENERIC_STAGE_LABEL
    assert classify([LogEntry(error="x")], DISCOVERY_STAGES) == GENERIC_STAGE_LABEL


def test_phase_tables_differ():
    node = [LogEntry(node_name="Search Scholar")]

    assert stages_for(Phase.DISCOVERY) is DISCOVERY_STAGES
    assert stages_for(Phase.EXTRACTION) is EXTRACTION_STAGES
    assert classify(node, DISCOVERY_STAGES) == "Searching academic databases..."
    assert classify(node, EXTRACTION_STAGES) == GENERIC_STAGE_LABEL
