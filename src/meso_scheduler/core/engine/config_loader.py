"""
YAML → PlannerSettings loader.

Loads planner parameters from planner.yaml (bundled with the package) and
optionally merges user overrides from ~/.meso-scheduler/planner.yaml.

Usage:
    from meso_scheduler.core.engine.config_loader import load_settings
    settings = load_settings()
    settings.max_sets_per_exercise   # 8 unless overridden

If the user override file exists but cannot be parsed, a warning is issued
and the file is ignored.  Keys the planner does not know are ignored with a
warning.  Values of the wrong type raise ConfigurationError.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_SETTINGS, PlannerSettings
from ..errors import ConfigurationError

# Section → keys accepted in that section.  Keys map 1:1 to PlannerSettings fields.
_SECTIONS: dict[str, tuple[str, ...]] = {
    "volume": (
        "max_sets_per_exercise",
        "max_sets_per_session_muscle_group",
        "baseline_sets_per_exercise",
    ),
    "cycle": ("default_week_count", "min_week_count", "max_week_count"),
    "progression": (
        "first_week_rir",
        "rep_drop_per_set",
        "weight_drop_factor",
        "load_progression_rate",
        "rep_progression_per_week",
    ),
}

_FIELD_TYPES: dict[str, type] = {
    f.name: (float if f.name in ("weight_drop_factor", "load_progression_rate") else int)
    for f in fields(PlannerSettings)
    if f.name != "rep_ranges"
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_yaml(path: Path) -> dict[str, Any]:
    """Parse one YAML file; non-mapping documents are treated as empty."""
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


def _coerce(name: str, value: Any) -> int | float:
    expected = _FIELD_TYPES[name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if expected is int and not float(value).is_integer():
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return expected(value)


def _bound(label: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not float(value).is_integer():
        raise ConfigurationError(f"{label} must be an integer, got {value!r}")
    return int(value)


def _rep_ranges(raw: Any) -> dict[str, tuple[int, int]]:
    if not isinstance(raw, dict):
        raise ConfigurationError("rep_ranges must be a mapping of class -> [min, max]")
    ranges: dict[str, tuple[int, int]] = {}
    for name, bounds in raw.items():
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise ConfigurationError(f"rep_ranges.{name} must be [min, max]")
        ranges[str(name)] = (
            _bound(f"rep_ranges.{name} min", bounds[0]),
            _bound(f"rep_ranges.{name} max", bounds[1]),
        )
    return ranges


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled planner.yaml, or None if not found."""
    candidate = Path(__file__).parent.parent.parent / "planner.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.meso-scheduler/planner.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".meso-scheduler" / "planner.yaml"
    return p if p.exists() else None


def load_model_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge planner configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/meso_scheduler/planner.yaml
    2. User override (user_path, or ~/.meso-scheduler/planner.yaml)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.

    Raises:
        ConfigurationError: If the bundled file cannot be parsed
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        try:
            config = _read_yaml(bundled)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Bundled planner.yaml is invalid: {e}") from e

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None:
        try:
            user_cfg = _read_yaml(user)
        except (OSError, yaml.YAMLError) as e:
            warnings.warn(f"Ignoring planner config {user}: {e}", stacklevel=2)
            user_cfg = {}
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def settings_from_dict(config: dict[str, Any]) -> PlannerSettings:
    """
    Build PlannerSettings from a merged config dict.

    Missing keys keep their defaults from config.py.

    Raises:
        ConfigurationError: On values of the wrong type or invalid combinations
    """
    values: dict[str, Any] = {}
    for section, raw in config.items():
        if section == "rep_ranges":
            values["rep_ranges"] = _rep_ranges(raw)
            continue
        if section not in _SECTIONS:
            warnings.warn(f"Unknown planner config section '{section}' ignored", stacklevel=2)
            continue
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Section '{section}' must be a mapping")
        for key, value in raw.items():
            if key not in _SECTIONS[section]:
                warnings.warn(f"Unknown planner config key '{section}.{key}' ignored", stacklevel=2)
                continue
            values[key] = _coerce(key, value)

    if not values:
        return DEFAULT_SETTINGS
    try:
        return PlannerSettings(**values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid planner config: {e}") from e


def load_settings(user_path: Path | None = None) -> PlannerSettings:
    """Load bundled + user YAML and return the resulting PlannerSettings."""
    return settings_from_dict(load_model_config(user_path))
