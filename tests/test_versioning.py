"""Tests for release version resolution."""

from __future__ import annotations

import re
from datetime import date

import pytest

from selog.errors import ConfigurationMissing
from selog.versioning import (
    compose_version,
    confirm_major_minor,
    resolve_major_minor,
    version_from_branch,
    version_from_tag,
)


class ScriptedPrompter:
    def __init__(self, confirms: list[bool], answers: list[str] | None = None) -> None:
        self.confirms = list(confirms)
        self.answers = list(answers or [])
        self.questions: list[str] = []

    def confirm(self, question: str, *, default: bool) -> bool:
        self.questions.append(question)
        return self.confirms.pop(0)

    def ask(self, question: str) -> str:
        self.questions.append(question)
        return self.answers.pop(0)


def test_explicit_override_wins_verbatim() -> None:
    assert resolve_major_minor("banana", "release/2.3.1", ["v9.9.9"]) == "banana"


def test_branch_version_beats_tags() -> None:
    assert resolve_major_minor(None, "release/2.3.1", ["v1.4.0"]) == "2.3"
    assert resolve_major_minor("", "hotfix-10.20.30-fix", []) == "10.20"


def test_highest_tag_used_without_branch_version() -> None:
    assert resolve_major_minor(None, "main", ["v1.4.0", "v1.2.0"]) == "1.4"


def test_defaults_without_branch_version_or_tags() -> None:
    assert resolve_major_minor(None, "main", []) == "0.0"


def test_tag_without_digits_falls_back() -> None:
    assert resolve_major_minor(None, "feature/login", ["nightly"]) == "0.0"


def test_version_from_branch_requires_three_components() -> None:
    assert version_from_branch("release/2.3") is None
    assert version_from_branch("release/2.3.1") == "2.3"


def test_version_from_tag_strips_prefix_and_pads_minor() -> None:
    assert version_from_tag("release-8.0.3") == "8.0"
    assert version_from_tag("v7") == "7.0"
    assert version_from_tag("v") is None


@pytest.mark.parametrize(
    "major_minor, day",
    [("0.0", date(2024, 1, 5)), ("12.345", date(1999, 12, 31)), ("2.3", date(2030, 7, 1))],
)
def test_compose_version_shape(major_minor: str, day: date) -> None:
    version = compose_version(major_minor, day)

    assert re.fullmatch(r"\d+\.\d+\.\d{8}\.1", version)
    assert version == f"{major_minor}.{day:%Y%m%d}.1"


def test_compose_version_defaults_to_today() -> None:
    assert compose_version("1.2") == f"1.2.{date.today():%Y%m%d}.1"


def test_confirm_skipped_with_auto_accept() -> None:
    prompter = ScriptedPrompter(confirms=[])

    assert confirm_major_minor("1.4", prompter, auto_accept=True) == "1.4"
    assert prompter.questions == []


def test_confirm_accepts_proposed_value() -> None:
    prompter = ScriptedPrompter(confirms=[True])

    assert confirm_major_minor("1.4", prompter) == "1.4"
    assert "1.4" in prompter.questions[0]


def test_confirm_override_replaces_value() -> None:
    prompter = ScriptedPrompter(confirms=[False], answers=[" 2.0 "])

    assert confirm_major_minor("1.4", prompter) == "2.0"


def test_confirm_override_requires_value() -> None:
    prompter = ScriptedPrompter(confirms=[False], answers=[""])

    with pytest.raises(ConfigurationMissing, match="major version is required"):
        confirm_major_minor("1.4", prompter)
