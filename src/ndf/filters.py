from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ndf.collectors.disk import MountRecord

log = logging.getLogger(__name__)

OVERLAY_FSTYPES: Tuple[str, ...] = ("overlay", "overlayfs", "fuse-overlayfs")
OVERLAY_PATH_MARKERS: Tuple[str, ...] = ("overlay", "overlay2")
SNAP_PREFIXES: Tuple[str, ...] = ("/snap", "/var/snap", "/var/lib/snapd/snap")


@dataclass(frozen=True)
class ExclusionRule:
    """Built-in exclusion: a named predicate, True means drop the mount."""

    name: str
    matches: Callable[[MountRecord], bool]


def under_prefix(path: str, prefix: str) -> bool:
    """Path-boundary prefix test: /snap/foo is under /snap, /snapshots is not."""
    prefix = prefix.rstrip("/") or "/"
    if prefix == "/":
        return path.startswith("/")
    return path == prefix or path.startswith(prefix + "/")


def overlay_rule(
    fstypes: Iterable[str] = OVERLAY_FSTYPES,
    path_markers: Iterable[str] = OVERLAY_PATH_MARKERS,
) -> ExclusionRule:
    types = frozenset(t.lower() for t in fstypes)
    markers = frozenset(path_markers)

    def matches(rec: MountRecord) -> bool:
        if rec.fstype.lower() in types:
            return True
        if rec.display_name.lower() in types:
            return True
        return any(part in markers for part in rec.mount_point.split("/"))

    return ExclusionRule(name="overlay", matches=matches)


def snap_rule(prefixes: Iterable[str] = SNAP_PREFIXES) -> ExclusionRule:
    roots = tuple(prefixes)

    def matches(rec: MountRecord) -> bool:
        return any(under_prefix(rec.mount_point, p) for p in roots)

    return ExclusionRule(name="snap", matches=matches)


DEFAULT_RULES: Tuple[ExclusionRule, ...] = (overlay_rule(), snap_rule())


def parse_mount_list(raw: Optional[str]) -> FrozenSet[str]:
    """'/, /home,,/data' -> {'/', '/home', '/data'}"""
    if not raw:
        return frozenset()
    return frozenset(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class FilterConfig:
    only: Optional[FrozenSet[str]] = None
    exclude: FrozenSet[str] = frozenset()
    rules: Tuple[ExclusionRule, ...] = field(default=DEFAULT_RULES)

    @classmethod
    def from_cli(
        cls,
        only_mp: Optional[str],
        exclude_mp: Optional[str],
        rules: Sequence[ExclusionRule] = DEFAULT_RULES,
    ) -> "FilterConfig":
        only = parse_mount_list(only_mp)
        return cls(only=only or None, exclude=parse_mount_list(exclude_mp), rules=tuple(rules))


def excluded_by(rec: MountRecord, rules: Sequence[ExclusionRule]) -> Optional[str]:
    """Name of the first rule that drops rec, None if it survives."""
    for rule in rules:
        if rule.matches(rec):
            return rule.name
    return None


def filter_mounts(records: Iterable[MountRecord], config: FilterConfig) -> List[MountRecord]:
    out: List[MountRecord] = []
    for rec in records:
        rule = excluded_by(rec, config.rules)
        if rule is not None:
            log.debug("drop %s: built-in rule %r", rec.mount_point, rule)
            continue
        if config.only and rec.mount_point not in config.only:
            log.debug("drop %s: not in --only-mp", rec.mount_point)
            continue
        if rec.mount_point in config.exclude:
            log.debug("drop %s: in --exclude-mp", rec.mount_point)
            continue
        out.append(rec)
    return out
