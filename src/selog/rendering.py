"""Release notes document rendering."""

from __future__ import annotations

from typing import Iterable

from .log import CommitRecord

TABLE_HEADER = "|hash|subject|tickets|"
TABLE_DIVIDER = "|---|-----------|------|"
TICKET_SEPARATOR = " , "


def render_row(record: CommitRecord) -> str:
    # Subjects are emitted as-is; a pipe in a subject breaks the table.
    tickets = TICKET_SEPARATOR.join(record.ticket_refs)
    return f"|{record.hash}|{record.subject}| {tickets} |"


def render_table(records: Iterable[CommitRecord]) -> list[str]:
    return [TABLE_HEADER, TABLE_DIVIDER, *(render_row(record) for record in records)]


def render(version: str, records: Iterable[CommitRecord]) -> str:
    """Return the release notes document for ``version``."""
    lines = [f"# {version}", "", *render_table(records)]
    return "\n".join(lines) + "\n"
