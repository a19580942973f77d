from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from ndf.filters import (
    OVERLAY_FSTYPES,
    OVERLAY_PATH_MARKERS,
    SNAP_PREFIXES,
    ExclusionRule,
    overlay_rule,
    snap_rule,
)


class ConfigError(Exception):
    """Config file missing, unreadable or with wrong value types."""


@dataclass(frozen=True)
class NdfConfig:
    # Built-in exclusions (overlay / snap)
    overlay_fstypes: Tuple[str, ...] = OVERLAY_FSTYPES
    overlay_path_markers: Tuple[str, ...] = OVERLAY_PATH_MARKERS
    snap_prefixes: Tuple[str, ...] = SNAP_PREFIXES

    # Bar widths per layout
    normal_bar_width: int = 48
    compact_bar_width: int = 30
    table_min_bar_width: int = 10

    def rules(self) -> Tuple[ExclusionRule, ...]:
        return (
            overlay_rule(self.overlay_fstypes, self.overlay_path_markers),
            snap_rule(self.snap_prefixes),
        )


DEFAULT_CONFIG = NdfConfig()


def _to_dict(cfg: NdfConfig) -> Dict[str, Any]:
    return {
        "exclude": {
            "fstypes": list(cfg.overlay_fstypes),
            "path_markers": list(cfg.overlay_path_markers),
            "prefixes": list(cfg.snap_prefixes),
        },
        "bars": {
            "normal": cfg.normal_bar_width,
            "compact": cfg.compact_bar_width,
            "table_min": cfg.table_min_bar_width,
        },
    }


def dump_config(cfg: NdfConfig) -> str:
    return yaml.safe_dump(_to_dict(cfg), sort_keys=False)


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _str_list(section: Dict[str, Any], key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(value)


def _width(section: Dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"'bars.{key}' must be a positive integer")
    return value


def parse_config(raw: Any) -> NdfConfig:
    """Build NdfConfig from a decoded YAML document, falling back on the defaults."""
    if raw is None:
        return DEFAULT_CONFIG
    if not isinstance(raw, dict):
        raise ConfigError("top level must be a mapping")

    exclude = _section(raw, "exclude")
    bars = _section(raw, "bars")
    d = DEFAULT_CONFIG

    return NdfConfig(
        overlay_fstypes=_str_list(exclude, "fstypes", d.overlay_fstypes),
        overlay_path_markers=_str_list(exclude, "path_markers", d.overlay_path_markers),
        snap_prefixes=_str_list(exclude, "prefixes", d.snap_prefixes),
        normal_bar_width=_width(bars, "normal", d.normal_bar_width),
        compact_bar_width=_width(bars, "compact", d.compact_bar_width),
        table_min_bar_width=_width(bars, "table_min", d.table_min_bar_width),
    )


def load_config(path: Path) -> NdfConfig:
    """Load the given YAML file, falling back on the defaults per field."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e.strerror or e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    return parse_config(raw)
