from __future__ import annotations

from typing import Callable

import pytest

from ndf.collectors.disk import MountRecord

GiB = 1 << 30


@pytest.fixture
def make_record() -> Callable[..., MountRecord]:
    def _make(
        mount_point: str,
        display_name: str = "",
        total_bytes: int = 100 * GiB,
        free_bytes: int = 50 * GiB,
        fstype: str = "ext4",
    ) -> MountRecord:
        return MountRecord(
            mount_point=mount_point,
            display_name=display_name or mount_point,
            total_bytes=total_bytes,
            free_bytes=free_bytes,
            fstype=fstype,
        )

    return _make


@pytest.fixture
def macintosh_hd() -> MountRecord:
    return MountRecord(
        mount_point="/",
        display_name="Macintosh HD",
        total_bytes=994662584320,
        free_bytes=326058553344,
        fstype="apfs",
    )
