"""
YAML → catalog config loader.

Loads the exercise catalog and preset templates from catalog.yaml (bundled
with the package) and optionally merges user overrides from
~/.liftlog/catalog.yaml.

Usage:
    from liftlog.core.engine.config_loader import load_catalog_config
    cfg = load_catalog_config()
    chest = cfg.get("catalog", {}).get("chest", [])

If the bundled YAML cannot be read or parsed, a RuntimeError is raised: the
application cannot start without a catalog. If the user override file has
parse errors, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; raise ValueError if it is not one."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


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


def get_data_dir() -> Path:
    """Return the per-user data directory (~/.liftlog)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".liftlog"


def load_bundled_config() -> dict[str, Any]:
    """
    Load the catalog.yaml shipped inside the package.

    Raises:
        RuntimeError: If the bundled file is missing or unreadable
    """
    ref = importlib.resources.files("liftlog").joinpath("catalog.yaml")
    try:
        with importlib.resources.as_file(ref) as path:
            return _load_yaml_file(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise RuntimeError(f"liftlog: cannot load bundled catalog.yaml: {e}") from e


def get_user_yaml_path() -> Path | None:
    """Return ~/.liftlog/catalog.yaml if it exists, else None."""
    p = get_data_dir() / "catalog.yaml"
    return p if p.exists() else None


def load_catalog_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge catalog configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/liftlog/catalog.yaml
    2. User override at ~/.liftlog/catalog.yaml (or *user_path*)

    Returns:
        Merged dict with "catalog" and "templates" sections.
    """
    config = load_bundled_config()

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, ValueError, yaml.YAMLError) as e:
            warnings.warn(f"Ignoring user catalog override {user}: {e}", stacklevel=2)
            user_cfg = {}
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config
