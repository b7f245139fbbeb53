"""Unit tests for configuration helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from selog.config import (
    ConfigStore,
    Settings,
    default_config_root,
    dump_settings,
    fingerprint,
    load_settings,
    save_settings,
)
from selog.errors import ConfigurationMissing


def write_yaml(path: Path, content: dict[str, object]) -> None:
    path.write_text(yaml.safe_dump(content, sort_keys=False), encoding="utf-8")


def test_default_config_root_prefers_xdg_config_home(tmp_path: Path) -> None:
    root = default_config_root({"XDG_CONFIG_HOME": str(tmp_path)})

    assert root == tmp_path / "selog"


def test_default_config_root_falls_back_to_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert default_config_root({}) == tmp_path / ".config" / "selog"
    assert default_config_root({"XDG_CONFIG_HOME": "  "}) == tmp_path / ".config" / "selog"


def test_default_config_root_explicit_override(tmp_path: Path) -> None:
    env = {"SELOG_CONFIG_DIR": str(tmp_path / "custom"), "XDG_CONFIG_HOME": "/ignored"}

    assert default_config_root(env) == tmp_path / "custom"


def test_fingerprint_is_stable_and_distinct() -> None:
    first = fingerprint("git@github.com:team/app.git")

    assert first == fingerprint("git@github.com:team/app.git")
    assert first != fingerprint("git@github.com:team/app2.git")
    assert len(first) == 64
    assert all(char in "0123456789abcdef" for char in first)


def test_fingerprint_matches_sha256_of_raw_url() -> None:
    # Matches `echo -n "" | sha256sum`.
    assert fingerprint("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_release_notes_url_round_trip(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "config")
    key = fingerprint("https://example.com/team/app.git")
    url = "https://wiki.example.com/display/APP/Release+Notes?x=1"

    assert store.get_release_notes_url(key) is None

    store.set_release_notes_url(key, url)

    assert store.get_release_notes_url(key) == url
    assert store.release_notes_path(key) == tmp_path / "config" / "repos" / f"{key}.conf"
    assert store.release_notes_path(key).read_text(encoding="utf-8") == f"{url}\n"


def test_set_release_notes_url_overwrites(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path)
    store.set_release_notes_url("abc", "https://one")
    store.set_release_notes_url("abc", "https://two")

    assert store.get_release_notes_url("abc") == "https://two"


def test_ticket_url_base_reads_hand_edited_file(tmp_path: Path) -> None:
    (tmp_path / "ticket_url.conf").write_text("https://x/browse\n\n", encoding="utf-8")
    store = ConfigStore(tmp_path)

    assert store.get_ticket_url_base() == "https://x/browse"


def test_ticket_url_base_prompts_once_and_persists(tmp_path: Path) -> None:
    calls: list[str] = []

    def ask() -> str:
        calls.append("asked")
        return "  https://x/browse  "

    store = ConfigStore(tmp_path / "nested" / "config", ask_ticket_url=ask)

    assert store.get_ticket_url_base() == "https://x/browse"
    assert store.get_ticket_url_base() == "https://x/browse"
    assert calls == ["asked"]
    assert store.ticket_url_path.read_text(encoding="utf-8") == "https://x/browse\n"


def test_ticket_url_base_rejects_empty_answer(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path, ask_ticket_url=lambda: "")

    with pytest.raises(ConfigurationMissing, match="required"):
        store.get_ticket_url_base()
    assert not store.ticket_url_path.exists()


def test_ticket_url_base_without_prompt_is_missing(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path)

    with pytest.raises(ConfigurationMissing):
        store.get_ticket_url_base()


def test_load_settings_defaults_when_file_missing(tmp_path: Path) -> None:
    assert ConfigStore(tmp_path).load_settings() == Settings()


def test_load_settings_parses_values(tmp_path: Path) -> None:
    write_yaml(
        tmp_path / "settings.yaml",
        {"trailer": "Refs:", "preview": False, "clipboard": False, "auto_accept": True},
    )

    settings = ConfigStore(tmp_path).load_settings()

    assert settings == Settings(trailer="Refs", preview=False, clipboard=False, auto_accept=True)


def test_load_settings_rejects_non_boolean(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    write_yaml(path, {"preview": "yes"})

    with pytest.raises(ValueError, match="'preview' must be a boolean"):
        load_settings(path)


def test_load_settings_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must be a mapping"):
        load_settings(path)


def test_dump_settings_omits_defaults() -> None:
    assert dump_settings(Settings()) == {}
    assert dump_settings(Settings(auto_accept=True)) == {"auto_accept": True}


def test_save_settings_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "deep" / "settings.yaml"
    settings = Settings(trailer="Jira", preview=False)

    save_settings(settings, path)

    assert load_settings(path) == settings


def test_load_settings_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("trailer: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="invalid YAML"):
        load_settings(path)
