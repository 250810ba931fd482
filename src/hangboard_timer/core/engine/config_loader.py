"""
YAML → dict config loader.

Loads timing overrides from timing.yaml (bundled with the package) and
optionally merges user overrides from ~/.hangboard-timer/timing.yaml.

Usage:
    from hangboard_timer.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    quick = cfg.get("timing", {}).get("quick", {})

If a YAML file cannot be read or parsed it is ignored with a logged
warning, and lookups fall back to the Python defaults in config.py.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; return {} on any read or parse error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable YAML file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_dir() -> Path:
    """Return ~/.hangboard-timer (not guaranteed to exist)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".hangboard-timer"


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled timing.yaml, or None if not found."""
    # config_loader.py lives at src/hangboard_timer/core/engine/
    candidate = Path(__file__).parent.parent.parent / "timing.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.hangboard-timer/timing.yaml if it exists, else None."""
    p = get_user_dir() / "timing.yaml"
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge timing configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/hangboard_timer/timing.yaml
    2. User override at ~/.hangboard-timer/timing.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = deep_merge(config, load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = load_yaml_file(user)
        if user_cfg:
            logger.debug("Merging user timing overrides from %s", user)
            config = deep_merge(config, user_cfg)

    return config
