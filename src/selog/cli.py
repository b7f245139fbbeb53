"""Command-line entry point for selog."""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .backends import (
    BrowserOpener,
    ClickBrowserOpener,
    Clipboard,
    CommandClipboard,
    FzfPicker,
    GitBackend,
    HistoryBackend,
    Picker,
    Previewer,
    RichPreviewer,
)
from .config import ConfigStore, Settings, default_config_root, fingerprint
from .errors import (
    ConfigurationMissing,
    MalformedArguments,
    OptionalSinkUnavailable,
    ReferenceNotFound,
    SelectionAborted,
)
from .log import extract, parse_selected_reference
from .rendering import render
from .utils import (
    abort_on_user_interrupt,
    configure_logging,
    emit_output,
    format_bold,
    log_debug,
    log_error,
    log_info,
    log_success,
    log_warning,
)
from .versioning import Prompter, compose_version, confirm_major_minor, resolve_major_minor

TICKET_URL_EXAMPLE = "https://example.atlassian.net/browse"
TEMPFILE_PREFIX = "se_log_output."


class ClickPrompter:
    """Prompter backed by click's terminal prompts."""

    def confirm(self, question: str, *, default: bool) -> bool:
        return click.confirm(question, default=default, err=True)

    def ask(self, question: str) -> str:
        value = click.prompt(question, default="", show_default=False, err=True)
        return str(value)


@dataclass
class CLIContext:
    """Shared command context."""

    project_root: Path
    store: ConfigStore
    prompter: Prompter
    history: HistoryBackend
    picker: Picker
    clipboard: Clipboard
    browser: BrowserOpener
    previewer: Previewer
    settings: Settings = field(default_factory=Settings)


def _ask_ticket_url_base(prompter: Prompter) -> str:
    log_info("no ticket URL configuration found.")
    return prompter.ask(f"Enter the base URL for tickets (e.g., {TICKET_URL_EXAMPLE})")


def create_cli_context(
    *,
    root: Path | None = None,
    config_dir: Path | None = None,
    debug: bool = False,
    prompter: Prompter | None = None,
) -> CLIContext:
    """Return a CLIContext wired to the real external tools."""

    configure_logging(debug)
    project_root = (root or Path(".")).resolve()
    config_root = config_dir.resolve() if config_dir else default_config_root()
    active_prompter: Prompter = prompter or ClickPrompter()
    store = ConfigStore(
        config_root,
        ask_ticket_url=lambda: _ask_ticket_url_base(active_prompter),
    )
    try:
        settings = store.load_settings()
    except ValueError as error:
        raise click.ClickException(f"{store.settings_path}: {error}") from error
    log_debug(f"resolved project root: {project_root}")
    log_debug(f"using config root: {config_root}")
    return CLIContext(
        project_root=project_root,
        store=store,
        prompter=active_prompter,
        history=GitBackend(project_root),
        picker=FzfPicker(project_root),
        clipboard=CommandClipboard(),
        browser=ClickBrowserOpener(),
        previewer=RichPreviewer(),
        settings=settings,
    )


def select_range_start(ctx: CLIContext, start: Optional[str]) -> str:
    """Return the starting reference, asking the picker when none was given."""
    if start:
        return start
    if not ctx.picker.available():
        raise SelectionAborted("fzf is not installed and no starting reference was provided.")
    selection = ctx.picker.pick(ctx.history.picker_candidates())
    reference = parse_selected_reference(selection) if selection else None
    if reference is None:
        raise SelectionAborted("no commit or tag selected.")
    log_debug(f"selected starting reference {reference}")
    return reference


def resolve_release_version(
    ctx: CLIContext, version_override: Optional[str], *, auto_accept: bool
) -> str:
    if version_override:
        major_minor = resolve_major_minor(version_override, "", ())
    else:
        major_minor = resolve_major_minor(
            None, ctx.history.current_branch(), ctx.history.tags_by_version_desc()
        )
    major_minor = confirm_major_minor(major_minor, ctx.prompter, auto_accept=auto_accept)
    return compose_version(major_minor)


def _write_document(document: str) -> Path:
    handle, name = tempfile.mkstemp(prefix=TEMPFILE_PREFIX, suffix=".md")
    with os.fdopen(handle, "w", encoding="utf-8") as stream:
        stream.write(document)
    return Path(name)


def _copy_to_clipboard(ctx: CLIContext, document: str) -> None:
    try:
        ctx.clipboard.copy(document)
    except OptionalSinkUnavailable as exc:
        log_warning(str(exc))
        return
    log_success("copied release notes to the clipboard.")


def _display(ctx: CLIContext, document: str, *, plain: bool) -> None:
    if not plain and ctx.previewer.available():
        ctx.previewer.show(document)
        return
    if not plain:
        log_debug("terminal preview unavailable, printing verbatim.")
    emit_output(document, newline=False)


def open_release_notes_page(ctx: CLIContext) -> Optional[str]:
    """Open the repository's release notes URL, collecting it on first use."""
    remote = ctx.history.remote_url()
    if remote is None:
        log_warning("no 'origin' remote configured. Cannot look up release notes URL.")
        return None
    repo_key = fingerprint(remote)
    log_debug(f"repository fingerprint for {remote}: {repo_key}")

    url = ctx.store.get_release_notes_url(repo_key)
    if url is None:
        log_info("no release notes URL configured for this repository.")
        if ctx.prompter.confirm("Would you like to add one?", default=True):
            url = ctx.prompter.ask("Enter the URL to open for release notes").strip() or None
            if url is not None:
                ctx.store.set_release_notes_url(repo_key, url)
                log_success(f"saved release notes URL for {remote}.")

    if url is None:
        log_warning("no URL configured. Cannot open release notes.")
        return None
    try:
        ctx.browser.open(url)
    except OptionalSinkUnavailable as exc:
        log_error(str(exc))
        return None
    return url


def generate_release_notes(
    ctx: CLIContext,
    *,
    start: Optional[str] = None,
    version_override: Optional[str] = None,
    auto_accept: bool = False,
    plain: bool = False,
    copy: bool = True,
    open_release_notes: Optional[bool] = None,
) -> str:
    """Build the release notes document and hand it to the configured sinks."""

    ticket_url_base = ctx.store.get_ticket_url_base()
    log_info(f"ticket URL base is set to: {format_bold(ticket_url_base)}")

    range_start = select_range_start(ctx, start)
    version = resolve_release_version(ctx, version_override, auto_accept=auto_accept)
    records = extract(
        ctx.history,
        ticket_url_base,
        range_start,
        trailer=ctx.settings.trailer,
    )
    log_debug(f"collected {len(records)} commit(s) for {version}")
    document = render(version, records)

    document_path = _write_document(document)
    try:
        if copy:
            _copy_to_clipboard(ctx, document)
        _display(ctx, document_path.read_text(encoding="utf-8"), plain=plain)
    finally:
        document_path.unlink(missing_ok=True)

    if open_release_notes is None:
        open_release_notes = ctx.prompter.confirm(
            "Do you want to open the release notes in your browser?", default=False
        )
    if open_release_notes:
        open_release_notes_page(ctx)
    return document


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="\n".join(
        [
            "\b",
            "Examples:",
            "  selog --version 1.2   # Use 1.2 and pick the start commit interactively",
            "  selog abc1234         # Log from abc1234 with the detected version",
            "  selog -y v8.0.0       # Log from tag v8.0.0 without confirming the version",
        ]
    ),
)
@click.argument("start", required=False)
@click.option(
    "-v",
    "--version",
    "version_override",
    metavar="MAJOR.MINOR",
    help="Use this major version instead of detecting it.",
)
@click.option(
    "-y",
    "--yes",
    "auto_accept",
    is_flag=True,
    help="Accept the detected version without prompting.",
)
@click.option(
    "--plain",
    is_flag=True,
    help="Print the document verbatim instead of rendering it.",
)
@click.option(
    "--clipboard/--no-clipboard",
    "copy",
    default=None,
    help="Copy the document to the system clipboard.",
)
@click.option(
    "--open/--no-open",
    "open_release_notes",
    default=None,
    help="Open the repository's release notes page without asking.",
)
@click.option(
    "--root",
    type=click.Path(path_type=Path, exists=True, file_okay=False),
    help="Repository to read history from (defaults to the current directory).",
)
@click.option(
    "--config-dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory holding selog configuration.",
)
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging.",
)
@click.version_option(__version__, "-V", prog_name="selog")
@click.pass_context
def cli(
    click_ctx: click.Context,
    start: Optional[str],
    version_override: Optional[str],
    auto_accept: bool,
    plain: bool,
    copy: Optional[bool],
    open_release_notes: Optional[bool],
    root: Path | None,
    config_dir: Path | None,
    debug: bool,
) -> None:
    """Generate release notes from the commits between START and HEAD.

    The notes are copied to the clipboard and can be opened alongside the
    repository's release notes page. Without START, a commit is picked
    interactively with fzf.
    """

    if isinstance(click_ctx.obj, CLIContext):
        ctx = click_ctx.obj
        configure_logging(debug)
    else:
        ctx = create_cli_context(root=root, config_dir=config_dir, debug=debug)
        click_ctx.obj = ctx

    settings = ctx.settings
    try:
        generate_release_notes(
            ctx,
            start=start,
            version_override=version_override,
            auto_accept=auto_accept or settings.auto_accept,
            plain=plain or not settings.preview,
            copy=settings.clipboard if copy is None else copy,
            open_release_notes=open_release_notes,
        )
    except (ConfigurationMissing, ReferenceNotFound, SelectionAborted) as exc:
        raise click.ClickException(str(exc)) from exc
    except RuntimeError as exc:
        raise click.ClickException(str(exc)) from exc


def main(argv: list[str] | None = None) -> int:
    """Entry point for console_scripts."""
    args = list(argv) if argv is not None else list(sys.argv[1:])
    configure_logging()

    try:
        cli.main(args=args, prog_name="selog", standalone_mode=False)
    except click.UsageError as exc:
        error = MalformedArguments(exc.format_message())
        log_error(str(error))
        log_info("use 'selog --help' for usage information.")
        return 1
    except click.ClickException as exc:
        log_error(exc.format_message())
        exit_code = getattr(exc, "exit_code", 1)
        return exit_code if isinstance(exit_code, int) else 1
    except (KeyboardInterrupt, click.exceptions.Abort) as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as exit_exc:
            exit_code = getattr(exit_exc, "exit_code", 130)
            return exit_code if isinstance(exit_code, int) else 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
