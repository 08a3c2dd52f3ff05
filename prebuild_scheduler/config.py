"""
Load config from config.yaml with optional env overrides.
Single source of truth for ledger DB path, catalog paths, remote endpoints and scheduler defaults.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .core.errors import ConfigError

# Defaults if no YAML or env
_DEFAULTS = {
    "db": {
        "path": "builds.sqlite",
        "busy_timeout_ms": 5000,
    },
    "catalog": {
        "libraries_path": "libraries.json",
        "runtime_versions_path": "react-native-versions.json",
    },
    "npm": {
        "registry_url": "https://registry.npmjs.org",
        "downloads_url": "https://api.npmjs.org",
        "timeout_s": 30.0,
    },
    "maven": {
        "api_url": "https://packages.rnrepo.org/api/maven/versions/releases/org/rnrepo/public",
        "timeout_s": 15.0,
    },
    "github": {
        "api_url": "https://api.github.com",
        "owner": "software-mansion",
        "repo": "rnrepo",
        "ref": "main",
        "timeout_s": 30.0,
        "workflows": {
            "android": "build-library-android.yml",
            "ios": "build-library-ios.yml",
        },
    },
    "scheduler": {
        "default_weekly_downloads_threshold": 10000,
        "companion_package": "react-native-worklets",
    },
    "runtime_versions": {
        "package": "react-native",
        "lookback_days": 100,
    },
}


def _repo_root() -> Path:
    """Repo root is the parent of the package dir."""
    return Path(__file__).resolve().parent.parent


def _config_yaml_path() -> Path:
    override = os.environ.get("PREBUILD_CONFIG")
    if override:
        return Path(override)
    return _repo_root() / "config.yaml"


def _load_yaml() -> dict:
    config_path = _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    path = os.environ.get("PREBUILD_DB_PATH")
    if path:
        overrides.setdefault("db", {})["path"] = path
    maven_url = os.environ.get("MAVEN_API_URL")
    if maven_url:
        overrides.setdefault("maven", {})["api_url"] = maven_url
    for env_name, key in (("GITHUB_OWNER", "owner"), ("GITHUB_REPO", "repo"), ("GITHUB_REF", "ref")):
        value = os.environ.get(env_name)
        if value:
            overrides.setdefault("github", {})[key] = value
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


def _resolve_path(p: str) -> str:
    if os.path.isabs(p):
        return p
    return str(_repo_root() / p)


# Convenience accessors
def db_path() -> str:
    return _resolve_path(get_config()["db"]["path"])


def db_busy_timeout_ms() -> int:
    return int(get_config()["db"]["busy_timeout_ms"])


def libraries_path() -> str:
    return _resolve_path(get_config()["catalog"]["libraries_path"])


def runtime_versions_path() -> str:
    return _resolve_path(get_config()["catalog"]["runtime_versions_path"])


def npm_settings() -> Dict[str, Any]:
    return dict(get_config()["npm"])


def maven_settings() -> Dict[str, Any]:
    return dict(get_config()["maven"])


def github_settings() -> Dict[str, Any]:
    return dict(get_config()["github"])


def github_token() -> Optional[str]:
    return os.environ.get("GITHUB_TOKEN") or None


def default_weekly_downloads_threshold() -> int:
    return int(get_config()["scheduler"]["default_weekly_downloads_threshold"])


def companion_package() -> str:
    return str(get_config()["scheduler"]["companion_package"])


def runtime_package() -> str:
    return str(get_config()["runtime_versions"]["package"])


def runtime_lookback_days() -> int:
    return int(get_config()["runtime_versions"]["lookback_days"])


def parse_limit(raw: Optional[str]) -> Optional[int]:
    """Parse a scheduling limit; None/empty means unlimited. Must be a positive integer."""
    if raw is None or str(raw).strip() == "":
        return None
    try:
        limit = int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"Invalid SCHEDULER_LIMIT value {raw!r}. Must be a positive integer.") from None
    if limit < 1:
        raise ConfigError(f"Invalid SCHEDULER_LIMIT value {raw!r}. Must be a positive integer.")
    return limit


def scheduler_limit() -> Optional[int]:
    return parse_limit(os.environ.get("SCHEDULER_LIMIT"))
