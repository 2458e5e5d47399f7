"""
YAML app config loader.

Loads application settings from liftlog.yaml (bundled with the package)
and optionally merges user overrides from ~/.liftlog/config.yaml.

Usage:
    from liftlog.core.engine.config_loader import load_app_config
    cfg = load_app_config()
    users = cfg.get("users", [])

If the user override file exists but cannot be parsed, a warning is issued
and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_NUM_SETS, DEFAULT_USERS, MAX_SETS, MIN_SETS

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} when it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"liftlog: ignoring config file {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_home_dir() -> Path:
    """Return the liftlog home directory ($LIFTLOG_HOME or ~/.liftlog)."""
    env = os.environ.get("LIFTLOG_HOME")
    if env:
        return Path(env).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".liftlog"


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled liftlog.yaml, or None if not found."""
    ref = importlib.resources.files("liftlog").joinpath("liftlog.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "liftlog.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return <home>/config.yaml if it exists, else None."""
    p = get_home_dir() / "config.yaml"
    return p if p.exists() else None


def load_app_config() -> dict[str, Any]:
    """
    Load and merge application configuration from YAML sources.

    Load order (later overrides earlier):
    1. Built-in defaults from core/config.py
    2. Bundled src/liftlog/liftlog.yaml
    3. User override at <home>/config.yaml

    Returns:
        Merged config dict with at least ``users``, ``default_num_sets``
        and ``data_dir`` keys.
    """
    config: dict[str, Any] = {
        "users": [dict(u) for u in DEFAULT_USERS],
        "default_num_sets": DEFAULT_NUM_SETS,
        "data_dir": None,
    }

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        config = _deep_merge(config, _load_yaml_file(user))

    num_sets = int(config.get("default_num_sets") or DEFAULT_NUM_SETS)
    config["default_num_sets"] = max(MIN_SETS, min(MAX_SETS, num_sets))
    return config


def configured_user_ids(config: dict[str, Any] | None = None) -> list[str]:
    """Ids of the users allowed to log workouts."""
    cfg = config if config is not None else load_app_config()
    return [str(u["id"]) for u in cfg.get("users", []) if isinstance(u, dict) and "id" in u]


def user_display_name(user_id: str, config: dict[str, Any] | None = None) -> str:
    """Display name for a user id; falls back to the capitalised id."""
    cfg = config if config is not None else load_app_config()
    for u in cfg.get("users", []):
        if isinstance(u, dict) and u.get("id") == user_id:
            return str(u.get("name") or user_id)
    return user_id.capitalize()


def default_data_dir(config: dict[str, Any] | None = None) -> Path:
    """Data directory from config, or the liftlog home directory."""
    cfg = config if config is not None else load_app_config()
    configured = cfg.get("data_dir")
    if configured:
        return Path(str(configured)).expanduser()
    return get_home_dir()
