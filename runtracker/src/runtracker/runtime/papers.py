from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from runtracker.contracts import PaperRecord

_TITLE_KEYS = ("title", "paper_title", "name")
_AUTHOR_KEYS = ("author", "authors")
_ABSTRACT_KEYS = ("abstract", "summary")
_LINK_KEYS = ("link", "paper_link", "url", "pdf_link")

# Positional layout of list rows: [id, title, author, abstract, link].
_TITLE_COLUMN = 1
_AUTHOR_COLUMN = 2
_ABSTRACT_COLUMN = 3
_LINK_COLUMN = 4


def parse_paper_rows(table: Sequence[Any]) -> list[PaperRecord]:
    """
    Turn the raw discovery table into paper records.

    Rows may be positional lists or mappings. A leading header row is skipped.
    Rows of any other shape are ignored.
    """
    papers: list[PaperRecord] = []
    for index, row in enumerate(table):
        if index == 0 and _is_header_row(row):
            continue
        paper_id = f"paper_{len(papers)}"
        if isinstance(row, Mapping):
            papers.append(_from_mapping(paper_id, row))
        elif isinstance(row, list | tuple):
            papers.append(_from_sequence(paper_id, row))
    return papers


def _is_header_row(row: Any) -> bool:
    if not isinstance(row, list | tuple) or len(row) <= _TITLE_COLUMN:
        return False
    cell = row[_TITLE_COLUMN]
    return isinstance(cell, str) and cell.strip().lower() == "title"


def _from_mapping(paper_id: str, row: Mapping[str, Any]) -> PaperRecord:
    lowered = {str(key).lower(): value for key, value in row.items()}
    return PaperRecord(
        paper_id=paper_id,
        title=_first_text(lowered, _TITLE_KEYS) or "Untitled Paper",
        author=_first_text(lowered, _AUTHOR_KEYS) or "Unknown Author",
        abstract=_first_text(lowered, _ABSTRACT_KEYS) or "No abstract available",
        link=_first_text(lowered, _LINK_KEYS),
    )


def _from_sequence(paper_id: str, row: Sequence[Any]) -> PaperRecord:
    return PaperRecord(
        paper_id=paper_id,
        title=_cell(row, _TITLE_COLUMN) or "Untitled Paper",
        author=_cell(row, _AUTHOR_COLUMN) or "Unknown Author",
        abstract=_cell(row, _ABSTRACT_COLUMN) or "No abstract available",
        link=_cell(row, _LINK_COLUMN),
    )


def _first_text(row: Mapping[str, Any], keys: Sequence[str]) -> str | None:
    for key in keys:
        text = _text(row.get(key))
        if text:
            return text
    return None


def _cell(row: Sequence[Any], column: int) -> str | None:
    if column >= len(row):
        return None
    return _text(row[column])


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list | tuple):
        value = ", ".join(str(item) for item in value if item is not None)
    text = str(value).strip()
    return text or None
