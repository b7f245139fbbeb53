"""Python-friendly facade for generating release notes without prompts."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from .backends import GitBackend, HistoryBackend
from .config import ConfigStore, Settings, default_config_root
from .log import DEFAULT_RANGE_END, CommitRecord, extract
from .rendering import render
from .utils import configure_logging
from .versioning import compose_version, resolve_major_minor


class ReleaseLog:
    """Non-interactive access to the release notes pipeline.

    The ticket URL base comes from ``ticket_url_base`` when given and from the
    configuration store otherwise. A missing value raises
    ``ConfigurationMissing`` instead of prompting.
    """

    def __init__(
        self,
        *,
        root: Path | str | None = None,
        config_dir: Path | str | None = None,
        ticket_url_base: Optional[str] = None,
        history: HistoryBackend | None = None,
        debug: bool = False,
    ) -> None:
        configure_logging(debug)
        project_root = Path(root) if root is not None else Path.cwd()
        config_root = Path(config_dir) if config_dir is not None else default_config_root()
        self.store = ConfigStore(config_root)
        self.history: HistoryBackend = history or GitBackend(project_root)
        self._ticket_url_base = ticket_url_base

    @property
    def settings(self) -> Settings:
        return self.store.load_settings()

    @property
    def ticket_url_base(self) -> str:
        if self._ticket_url_base is not None:
            return self._ticket_url_base
        return self.store.get_ticket_url_base()

    def version(
        self, version_override: Optional[str] = None, *, today: Optional[date] = None
    ) -> str:
        """Return the release version the CLI would propose."""
        if version_override:
            major_minor = resolve_major_minor(version_override, "", ())
        else:
            major_minor = resolve_major_minor(
                None, self.history.current_branch(), self.history.tags_by_version_desc()
            )
        return compose_version(major_minor, today)

    def records(
        self, start: Optional[str] = None, end: str = DEFAULT_RANGE_END
    ) -> list[CommitRecord]:
        return extract(
            self.history,
            self.ticket_url_base,
            start,
            end,
            trailer=self.settings.trailer,
        )

    def render(
        self,
        start: Optional[str] = None,
        *,
        end: str = DEFAULT_RANGE_END,
        version_override: Optional[str] = None,
        today: Optional[date] = None,
    ) -> str:
        """Return the release notes document for ``start..end``."""
        return render(self.version(version_override, today=today), self.records(start, end))
