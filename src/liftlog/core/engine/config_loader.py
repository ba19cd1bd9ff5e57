"""
YAML → dict config loader.

Loads analytics tunables from analytics.yaml (bundled with the package) and
optionally merges user overrides from ~/.liftlog/analytics.yaml.

Usage:
    from liftlog.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    threshold = cfg.get("analytics", {}).get("trend_slope_threshold", 0.1)

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

CONFIG_FILENAME = "analytics.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; non-mapping documents load as {}."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
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


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled analytics.yaml, or None if not found."""
    ref = importlib.resources.files("liftlog").joinpath(CONFIG_FILENAME)
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def get_user_config_dir() -> Path:
    """Return the per-user liftlog directory (LIFTLOG_HOME or ~/.liftlog)."""
    override = os.environ.get("LIFTLOG_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".liftlog"


def get_user_yaml_path() -> Path | None:
    """Return the user's analytics.yaml override if it exists, else None."""
    p = get_user_config_dir() / CONFIG_FILENAME
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge analytics configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/liftlog/analytics.yaml
    2. User override at ~/.liftlog/analytics.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"liftlog: ignoring unreadable config {user} ({exc})",
                stacklevel=2,
            )
            user_cfg = {}
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config
