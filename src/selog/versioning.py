"""Release version resolution."""

from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Optional, Protocol, Sequence

from .errors import ConfigurationMissing

DEFAULT_MAJOR_MINOR = "0.0"
BUILD_NUMBER = "1"

_BRANCH_VERSION = re.compile(r"(\d+)\.(\d+)\.(\d+)")
_LEADING_NON_DIGITS = re.compile(r"^\D*")


class Prompter(Protocol):
    """Interactive question capability."""

    def confirm(self, question: str, *, default: bool) -> bool: ...

    def ask(self, question: str) -> str: ...


def version_from_branch(branch: str) -> Optional[str]:
    """Return ``major.minor`` embedded in a branch name like ``release/2.3.1``."""
    match = _BRANCH_VERSION.search(branch)
    if match is None:
        return None
    return f"{match.group(1)}.{match.group(2)}"


def version_from_tag(tag: str) -> Optional[str]:
    """Return the first two dot-separated components of a tag like ``v1.4.0``."""
    stripped = _LEADING_NON_DIGITS.sub("", tag.strip())
    if not stripped:
        return None
    major, _, remainder = stripped.partition(".")
    minor = remainder.split(".", 1)[0] or "0"
    return f"{major}.{minor}"


def resolve_major_minor(
    explicit_override: Optional[str],
    current_branch: str,
    tags: Sequence[str],
) -> str:
    """Return ``major.minor`` from an override, the branch name, or the tags.

    ``tags`` must be ordered by version, highest first.
    """
    if explicit_override:
        return explicit_override
    from_branch = version_from_branch(current_branch or "")
    if from_branch is not None:
        return from_branch
    if not tags:
        return DEFAULT_MAJOR_MINOR
    return version_from_tag(tags[0]) or DEFAULT_MAJOR_MINOR


def compose_version(major_minor: str, today: Optional[date] = None) -> str:
    """Return the full ``major.minor.YYYYMMDD.1`` release version."""
    day = today or date.today()
    return f"{major_minor}.{day.strftime('%Y%m%d')}.{BUILD_NUMBER}"


class VersionState(Enum):
    """States of the version confirmation flow."""

    RESOLVE = "resolve"
    CONFIRM_OR_OVERRIDE = "confirm-or-override"
    DONE = "done"


def confirm_major_minor(
    proposed: str,
    prompter: Prompter,
    *,
    auto_accept: bool = False,
) -> str:
    """Let the user accept or replace the resolved ``major.minor``."""
    state = VersionState.RESOLVE
    value = proposed
    while state is not VersionState.DONE:
        if state is VersionState.RESOLVE:
            state = VersionState.DONE if auto_accept else VersionState.CONFIRM_OR_OVERRIDE
        elif state is VersionState.CONFIRM_OR_OVERRIDE:
            if not prompter.confirm(
                f"Current major version is {value}. Is this correct?", default=True
            ):
                value = prompter.ask("Enter the correct major version").strip()
                if not value:
                    raise ConfigurationMissing("major version is required.")
            state = VersionState.DONE
    return value
