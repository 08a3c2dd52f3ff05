"""Config loading: defaults, YAML overlay, env overrides, scheduler limit parsing."""

from __future__ import annotations

import pytest

from prebuild_scheduler import config
from prebuild_scheduler.core.errors import ConfigError


@pytest.mark.parametrize("raw,expected", [(None, None), ("", None), ("  ", None), ("5", 5), (" 12 ", 12)])
def test_parse_limit(raw, expected):
    assert config.parse_limit(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-3", "ten", "1.5"])
def test_parse_limit_rejects_invalid(raw):
    with pytest.raises(ConfigError, match="positive integer"):
        config.parse_limit(raw)


def test_scheduler_limit_from_env(monkeypatch):
    monkeypatch.setenv("SCHEDULER_LIMIT", "7")
    assert config.scheduler_limit() == 7
    monkeypatch.delenv("SCHEDULER_LIMIT")
    assert config.scheduler_limit() is None


def test_yaml_overlays_defaults(monkeypatch, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("scheduler:\n  default_weekly_downloads_threshold: 500\n", encoding="utf-8")
    monkeypatch.setenv("PREBUILD_CONFIG", str(cfg))
    assert config.default_weekly_downloads_threshold() == 500
    assert config.companion_package() == "react-native-worklets"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PREBUILD_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("PREBUILD_DB_PATH", str(tmp_path / "ledger.sqlite"))
    monkeypatch.setenv("GITHUB_OWNER", "someone")
    monkeypatch.setenv("GITHUB_TOKEN", "abc")
    assert config.db_path() == str(tmp_path / "ledger.sqlite")
    assert config.github_settings()["owner"] == "someone"
    assert config.github_settings()["repo"] == "rnrepo"
    assert config.github_token() == "abc"


def test_relative_paths_resolve_against_repo_root(monkeypatch, tmp_path):
    monkeypatch.setenv("PREBUILD_CONFIG", str(tmp_path / "missing.yaml"))
    assert config.libraries_path().endswith("libraries.json")
    assert config.libraries_path() != "libraries.json"
