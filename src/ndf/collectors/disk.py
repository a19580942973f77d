from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

log = logging.getLogger(__name__)

PROC_MOUNTS: Tuple[str, ...] = ("/proc/self/mounts", "/proc/mounts")

# Kernel/virtual filesystems that never carry user data.
# overlay and squashfs are left to the mount filter rules.
IGNORE_FSTYPES: Set[str] = {
    "autofs",
    "binfmt_misc",
    "bpf",
    "cgroup",
    "cgroup2",
    "configfs",
    "debugfs",
    "devfs",
    "devpts",
    "devtmpfs",
    "efivarfs",
    "fusectl",
    "hugetlbfs",
    "mqueue",
    "nsfs",
    "proc",
    "pstore",
    "ramfs",
    "rpc_pipefs",
    "securityfs",
    "sysfs",
    "tmpfs",
    "tracefs",
}

_OCTAL_RE = re.compile(r"\\([0-7]{3})")
# macOS / BSD: "/dev/disk3s1s1 on / (apfs, sealed, local, read-only, journaled)"
MOUNT_LINE_RE = re.compile(r"^(?P<dev>\S+)\s+on\s+(?P<mp>.+?)\s+\((?P<fstype>[^,)]+)")


@dataclass(frozen=True)
class MountRecord:
    mount_point: str
    display_name: str
    total_bytes: int
    free_bytes: int
    fstype: str = ""

    @property
    def used_bytes(self) -> int:
        return self.total_bytes - self.free_bytes

    @property
    def usage_ratio(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes


def _unescape(field: str) -> str:
    # /proc/mounts escapes space, tab, newline and backslash as \ooo
    return _OCTAL_RE.sub(lambda m: chr(int(m.group(1), 8)), field)


def printable(raw: str) -> str:
    """
    Display form of a path read from the mount table.
    Undecodable bytes become U+FFFD, control characters are backslash-escaped.
    """
    try:
        data = raw.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        data = raw.encode("utf-8", "replace")
    text = data.decode("utf-8", "replace")
    return "".join(c if c.isprintable() else c.encode("unicode_escape").decode("ascii") for c in text)


def parse_proc_mounts(lines: Iterable[str]) -> List[Tuple[str, str, str]]:
    """
    Parse /proc/mounts lines.
    Returns list of (device, mount_point, fstype), in file order.
    """
    out: List[Tuple[str, str, str]] = []
    for line in lines:
        parts = line.split()
        if len(parts) < 3:
            continue
        out.append((_unescape(parts[0]), _unescape(parts[1]), parts[2]))
    return out


def parse_mount_output(text: str) -> List[Tuple[str, str, str]]:
    """Parse `mount` output (macOS/BSD) into (device, mount_point, fstype)."""
    out: List[Tuple[str, str, str]] = []
    for line in text.splitlines():
        m = MOUNT_LINE_RE.match(line)
        if not m:
            continue
        out.append((m.group("dev"), m.group("mp"), m.group("fstype").strip().lower()))
    return out


def _read_mount_table() -> List[Tuple[str, str, str]]:
    for path in PROC_MOUNTS:
        try:
            with open(path, "r", encoding="utf-8", errors="surrogateescape") as f:
                entries = parse_proc_mounts(f)
        except OSError:
            continue
        log.debug("mount table: %s (%d entries)", path, len(entries))
        return entries

    try:
        output = subprocess.run(
            ["mount"],
            capture_output=True,
            text=True,
            errors="surrogateescape",
            timeout=5.0,
            check=True,
        ).stdout
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("cannot enumerate mounts: %s", e)
        return []
    entries = parse_mount_output(output)
    log.debug("mount table: `mount` output (%d entries)", len(entries))
    return entries


def _statvfs_usage(path: str) -> Tuple[int, int]:
    st = os.statvfs(path)
    frsize = int(st.f_frsize or st.f_bsize)
    total = frsize * int(st.f_blocks)
    free = frsize * int(st.f_bavail)
    return total, min(max(0, free), total)


def build_record(device: str, mount: str, fstype: str) -> Optional[MountRecord]:
    """MountRecord for one mount table entry, None when it can't be read."""
    if fstype in IGNORE_FSTYPES:
        return None

    # statvfs needs the raw path, records carry the printable one
    if not os.path.isdir(mount):
        log.debug("skip %s: not a directory", printable(mount))
        return None

    try:
        total, free = _statvfs_usage(mount)
    except OSError as e:
        log.debug("skip %s: statvfs failed (%s)", printable(mount), e)
        return None

    name = printable(device) if device and device != "none" else printable(mount)
    return MountRecord(
        mount_point=printable(mount),
        display_name=name,
        total_bytes=total,
        free_bytes=free,
        fstype=fstype,
    )


def list_mounts(entries: Optional[Iterable[Tuple[str, str, str]]] = None) -> List[MountRecord]:
    """Readable mounts, '/' first then alphabetical."""
    if entries is None:
        entries = _read_mount_table()

    mounts: List[MountRecord] = []
    seen: Set[str] = set()
    for device, mount, fstype in entries:
        if mount in seen:
            continue
        seen.add(mount)

        rec = build_record(device, mount, fstype)
        if rec is not None:
            mounts.append(rec)

    mounts.sort(key=lambda m: (m.mount_point != "/", m.mount_point))
    return mounts
