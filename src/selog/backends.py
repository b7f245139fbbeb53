"""Capabilities wrapping the external tools selog shells out to.

Each tool sits behind a small protocol with exactly one implementation so the
core pipeline can be exercised with fakes.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

import click
from rich.console import Console
from rich.markdown import Markdown

from .errors import OptionalSinkUnavailable, ReferenceNotFound, SelectionAborted
from .utils import log_debug, stdout_console

_FIELD_SEPARATOR = "\x1f"
_RECORD_SEPARATOR = "\x1e"

CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)

PICKER_LOG_FORMAT = "%C(yellow)%h %C(green)%d %C(reset)%s %C(bold)%cr"
PICKER_PREVIEW = "git show --color=always $(echo {} | grep -Eo '[0-9a-f]{7,40}' | head -n 1)"


@dataclass(frozen=True)
class RawCommit:
    """Commit metadata as reported by git."""

    hash: str
    subject: str
    body: str


class HistoryBackend(Protocol):
    def list_commits(self, range_start: str, range_end: str) -> list[RawCommit]: ...

    def current_branch(self) -> str: ...

    def tags_by_version_desc(self) -> list[str]: ...

    def remote_url(self, name: str = "origin") -> Optional[str]: ...

    def root_commits(self, ref: str = "HEAD") -> list[str]: ...

    def picker_candidates(self) -> str: ...


class Picker(Protocol):
    def available(self) -> bool: ...

    def pick(self, candidates: str) -> Optional[str]: ...


class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


class BrowserOpener(Protocol):
    def open(self, url: str) -> None: ...


class Previewer(Protocol):
    def available(self) -> bool: ...

    def show(self, document: str) -> None: ...


class GitBackend:
    """History queries answered by the ``git`` executable."""

    def __init__(self, project_root: Path | None = None) -> None:
        self.project_root = project_root or Path.cwd()

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        command = ["git", *args]
        log_debug(f"running {' '.join(command)}")
        try:
            return subprocess.run(
                command,
                cwd=str(self.project_root),
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise RuntimeError("git is required but was not found in PATH.") from exc

    def list_commits(self, range_start: str, range_end: str = "HEAD") -> list[RawCommit]:
        """Return non-merge commits in ``range_start..range_end``, oldest first."""
        log_format = _FIELD_SEPARATOR.join(("%H", "%s", "%B")) + _RECORD_SEPARATOR
        try:
            result = self._run(
                [
                    "log",
                    f"{range_start}..{range_end}",
                    "--no-merges",
                    "--reverse",
                    f"--format={log_format}",
                    "--",
                ]
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip().splitlines()
            raise ReferenceNotFound(range_start, detail[0] if detail else "") from exc

        commits: list[RawCommit] = []
        for chunk in result.stdout.split(_RECORD_SEPARATOR):
            chunk = chunk.lstrip("\n")
            if not chunk:
                continue
            commit_hash, subject, body = (chunk.split(_FIELD_SEPARATOR, 2) + ["", ""])[:3]
            commits.append(RawCommit(hash=commit_hash, subject=subject, body=body.rstrip("\n")))
        return commits

    def current_branch(self) -> str:
        try:
            result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        except subprocess.CalledProcessError:
            return ""
        return result.stdout.strip()

    def tags_by_version_desc(self) -> list[str]:
        try:
            result = self._run(["tag", "--no-column", "--sort=-v:refname"])
        except subprocess.CalledProcessError:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def remote_url(self, name: str = "origin") -> Optional[str]:
        try:
            result = self._run(["config", "--get", f"remote.{name}.url"])
        except subprocess.CalledProcessError:
            return None
        url = result.stdout.strip()
        return url or None

    def root_commits(self, ref: str = "HEAD") -> list[str]:
        try:
            result = self._run(["rev-list", "--max-parents=0", ref])
        except subprocess.CalledProcessError as exc:
            raise ReferenceNotFound(ref, (exc.stderr or "").strip()) from exc
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def picker_candidates(self) -> str:
        try:
            result = self._run(
                [
                    "log",
                    "--graph",
                    "--color=always",
                    f"--format={PICKER_LOG_FORMAT}",
                    "--abbrev-commit",
                    "--date=relative",
                ]
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip().splitlines()
            message = "cannot list commits to pick from"
            if detail:
                message = f"{message}: {detail[0]}"
            raise SelectionAborted(f"{message}.") from exc
        return result.stdout


class FzfPicker:
    """Interactive single selection through ``fzf``."""

    def __init__(self, project_root: Path | None = None) -> None:
        self.project_root = project_root or Path.cwd()

    def _executable(self) -> Optional[str]:
        return shutil.which("fzf")

    def available(self) -> bool:
        return self._executable() is not None

    def pick(self, candidates: str) -> Optional[str]:
        fzf_path = self._executable()
        if fzf_path is None:
            return None
        result = subprocess.run(
            [
                fzf_path,
                "--ansi",
                "--no-sort",
                "--reverse",
                "--tiebreak=index",
                "--preview",
                PICKER_PREVIEW,
                "--preview-window=right:60%",
            ],
            cwd=str(self.project_root),
            input=candidates,
            stdout=subprocess.PIPE,
            text=True,
            check=False,
        )
        # fzf exits with 1 on no match and 130 on abort.
        if result.returncode != 0:
            log_debug(f"fzf exited with status {result.returncode}")
            return None
        selection = result.stdout.strip()
        return selection or None


class CommandClipboard:
    """System clipboard access through the first available copy utility."""

    def __init__(self, commands: Sequence[Sequence[str]] = CLIPBOARD_COMMANDS) -> None:
        self.commands = tuple(tuple(command) for command in commands)

    def _resolve(self) -> Optional[list[str]]:
        for command in self.commands:
            path = shutil.which(command[0])
            if path is not None:
                return [path, *command[1:]]
        return None

    def copy(self, text: str) -> None:
        command = self._resolve()
        if command is None:
            names = ", ".join(candidate[0] for candidate in self.commands)
            raise OptionalSinkUnavailable(
                f"no clipboard utility found. Please install one of: {names}."
            )
        try:
            subprocess.run(command, input=text, text=True, check=True)
        except subprocess.CalledProcessError as exc:
            raise OptionalSinkUnavailable(
                f"{command[0]} failed to copy to the clipboard (exit status {exc.returncode})."
            ) from exc


class ClickBrowserOpener:
    """Open URLs with the platform's default handler."""

    def open(self, url: str) -> None:
        status = click.launch(url)
        if status != 0:
            raise OptionalSinkUnavailable(f"cannot open URL: {url}")


class RichPreviewer:
    """Render Markdown documents for terminal display."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or stdout_console

    def available(self) -> bool:
        return self.console.is_terminal

    def show(self, document: str) -> None:
        self.console.print(Markdown(document))
