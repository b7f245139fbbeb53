"""Commit log extraction and ticket trailer parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .backends import HistoryBackend
from .config import DEFAULT_TRAILER
from .errors import ReferenceNotFound
from .utils import log_debug

DEFAULT_RANGE_END = "HEAD"

_SELECTED_HASH = re.compile(r"\b[0-9a-f]{7,40}\b")


@dataclass(frozen=True)
class CommitRecord:
    """One row of the release notes table."""

    hash: str
    subject: str
    ticket_refs: tuple[str, ...] = ()


def parse_ticket_ids(body: str, trailer: str = DEFAULT_TRAILER) -> tuple[str, ...]:
    """Return ticket identifiers declared in ``<trailer>:`` lines of a commit body.

    A line matches when it starts with the trailer, ignoring case and leading
    whitespace, and every matching line contributes. The text after the first
    colon is split on commas; blank pieces are dropped and the rest is returned
    verbatim, in order, without deduplication.
    """
    needle = f"{trailer.lower()}:"
    tickets: list[str] = []
    for line in body.splitlines():
        if not line.lstrip().lower().startswith(needle):
            continue
        _, _, value = line.partition(":")
        for piece in value.split(","):
            token = piece.strip()
            if token:
                tickets.append(token)
    return tuple(tickets)


def ticket_url(base: str, ticket: str) -> str:
    return f"{base}/{ticket}"


def parse_ticket_trailers(
    body: str, base: str, trailer: str = DEFAULT_TRAILER
) -> tuple[str, ...]:
    """Return tracker URLs for every ticket declared in a commit body."""
    return tuple(ticket_url(base, ticket) for ticket in parse_ticket_ids(body, trailer))


def parse_selected_reference(selection: str) -> Optional[str]:
    """Return the first abbreviated or full commit hash in a picker line."""
    match = _SELECTED_HASH.search(selection)
    return match.group(0) if match else None


def default_range_start(backend: HistoryBackend, range_end: str = DEFAULT_RANGE_END) -> str:
    """Return a root commit of ``range_end``.

    Repositories with several root commits yield whichever one git lists first.
    """
    roots = backend.root_commits(range_end)
    if not roots:
        raise ReferenceNotFound(range_end, "no root commit found")
    if len(roots) > 1:
        log_debug(f"found {len(roots)} root commits, using {roots[0]}")
    return roots[0]


def extract(
    backend: HistoryBackend,
    ticket_url_base: str,
    range_start: Optional[str] = None,
    range_end: str = DEFAULT_RANGE_END,
    *,
    trailer: str = DEFAULT_TRAILER,
) -> list[CommitRecord]:
    """Return one record per non-merge commit in ``range_start..range_end``."""
    start = range_start or default_range_start(backend, range_end)
    log_debug(f"extracting commits in {start}..{range_end}")
    records: list[CommitRecord] = []
    for commit in backend.list_commits(start, range_end):
        records.append(
            CommitRecord(
                hash=commit.hash,
                subject=commit.subject,
                ticket_refs=parse_ticket_trailers(commit.body, ticket_url_base, trailer),
            )
        )
    return records
