"""Configuration helpers for selog.

All persisted state lives under a per-user configuration root:

- ``ticket_url.conf`` holds the global ticket URL base.
- ``repos/<fingerprint>.conf`` holds the release notes URL of one repository.
- ``settings.yaml`` optionally overrides tool defaults.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Optional

import yaml

from .errors import ConfigurationMissing
from .utils import log_debug

APP_DIRECTORY_NAME = "selog"
TICKET_URL_FILENAME = "ticket_url.conf"
REPOS_DIRECTORY_NAME = "repos"
REPO_CONFIG_SUFFIX = ".conf"
SETTINGS_FILENAME = "settings.yaml"
CONFIG_DIR_ENV = "SELOG_CONFIG_DIR"
DEFAULT_TRAILER = "Tickets"


def default_config_root(env: Mapping[str, str] | None = None) -> Path:
    """Return the configuration root, honoring XDG_CONFIG_HOME."""
    env_mapping = env if env is not None else os.environ
    explicit = env_mapping.get(CONFIG_DIR_ENV, "").strip()
    if explicit:
        return Path(explicit).expanduser()
    xdg_home = env_mapping.get("XDG_CONFIG_HOME", "").strip()
    if xdg_home:
        base = Path(xdg_home).expanduser()
    else:
        base = Path.home() / ".config"
    return base / APP_DIRECTORY_NAME


def fingerprint(remote_url: str) -> str:
    """Return a stable, filesystem-safe key for a repository remote URL."""
    return hashlib.sha256(remote_url.encode("utf-8")).hexdigest()


def _read_value(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    value = path.read_text(encoding="utf-8").strip()
    return value or None


def _write_value(path: Path, value: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{value}\n", encoding="utf-8")


class ConfigStore:
    """Flat-file store for ticket and release notes URLs.

    The store is created once per invocation and handed to every component
    that needs configuration. ``ask_ticket_url`` is called when the global
    ticket URL base has not been configured yet; without it a missing value
    raises ``ConfigurationMissing``.
    """

    def __init__(
        self,
        root: Path,
        *,
        ask_ticket_url: Callable[[], str] | None = None,
    ) -> None:
        self.root = root
        self._ask_ticket_url = ask_ticket_url

    @property
    def ticket_url_path(self) -> Path:
        return self.root / TICKET_URL_FILENAME

    @property
    def repos_directory(self) -> Path:
        return self.root / REPOS_DIRECTORY_NAME

    @property
    def settings_path(self) -> Path:
        return self.root / SETTINGS_FILENAME

    def release_notes_path(self, repo_fingerprint: str) -> Path:
        return self.repos_directory / f"{repo_fingerprint}{REPO_CONFIG_SUFFIX}"

    def get_ticket_url_base(self) -> str:
        """Return the ticket URL base, collecting it interactively on first use."""
        stored = _read_value(self.ticket_url_path)
        if stored is not None:
            return stored
        if self._ask_ticket_url is None:
            raise ConfigurationMissing(
                f"no ticket URL base configured at {self.ticket_url_path}."
            )
        supplied = (self._ask_ticket_url() or "").strip()
        if not supplied:
            raise ConfigurationMissing("ticket URL base is required.")
        self.set_ticket_url_base(supplied)
        return supplied

    def set_ticket_url_base(self, url: str) -> None:
        _write_value(self.ticket_url_path, url)
        log_debug(f"stored ticket URL base in {self.ticket_url_path}")

    def get_release_notes_url(self, repo_fingerprint: str) -> Optional[str]:
        return _read_value(self.release_notes_path(repo_fingerprint))

    def set_release_notes_url(self, repo_fingerprint: str, url: str) -> None:
        path = self.release_notes_path(repo_fingerprint)
        _write_value(path, url)
        log_debug(f"stored release notes URL in {path}")

    def load_settings(self) -> "Settings":
        path = self.settings_path
        if not path.exists():
            return Settings()
        return load_settings(path)


@dataclass
class Settings:
    """Tool defaults read from ``settings.yaml``."""

    trailer: str = DEFAULT_TRAILER
    preview: bool = True
    clipboard: bool = True
    auto_accept: bool = False


def _coerce_bool(raw: MutableMapping[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Settings option '{key}' must be a boolean.")
    return value


def load_settings(path: Path) -> Settings:
    """Load tool settings from disk."""
    with path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
    if not isinstance(raw, MutableMapping):
        raise ValueError("Settings root must be a mapping")

    trailer = DEFAULT_TRAILER
    trailer_raw = raw.get("trailer")
    if trailer_raw is not None:
        if not isinstance(trailer_raw, str):
            raise ValueError("Settings option 'trailer' must be a string.")
        trailer = trailer_raw.strip().rstrip(":").strip()
        if not trailer:
            raise ValueError("Settings option 'trailer' cannot be empty.")

    return Settings(
        trailer=trailer,
        preview=_coerce_bool(raw, "preview", True),
        clipboard=_coerce_bool(raw, "clipboard", True),
        auto_accept=_coerce_bool(raw, "auto_accept", False),
    )


def dump_settings(settings: Settings) -> dict[str, Any]:
    """Convert Settings into a plain dictionary, omitting defaults."""
    data: dict[str, Any] = {}
    if settings.trailer != DEFAULT_TRAILER:
        data["trailer"] = settings.trailer
    if not settings.preview:
        data["preview"] = settings.preview
    if not settings.clipboard:
        data["clipboard"] = settings.clipboard
    if settings.auto_accept:
        data["auto_accept"] = settings.auto_accept
    return data


def save_settings(settings: Settings, path: Path) -> None:
    """Write tool settings to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dump_settings(settings), handle, sort_keys=False)
