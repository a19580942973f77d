from __future__ import annotations

import logging

from hypothesis import given, strategies as st

from ndf.collectors.disk import MountRecord
from ndf.filters import (
    DEFAULT_RULES,
    FilterConfig,
    excluded_by,
    filter_mounts,
    parse_mount_list,
    snap_rule,
    under_prefix,
)


def _mps(records):
    return [r.mount_point for r in records]


def test_only_and_exclude_with_builtin_snap(make_record) -> None:
    records = [make_record("/"), make_record("/home"), make_record("/snap/foo", fstype="squashfs")]
    cfg = FilterConfig.from_cli("/,/home", "/home")

    assert _mps(filter_mounts(records, cfg)) == ["/"]


def test_builtin_exclusions_without_user_lists(make_record) -> None:
    records = [
        make_record("/"),
        make_record("/snap"),
        make_record("/snap/core/123", fstype="squashfs"),
        make_record("/var/lib/snapd/snap/lxd/1", fstype="squashfs"),
        make_record("/snapshots"),
        make_record("/var/lib/docker/overlay2/abc/merged", fstype="ext4"),
        make_record("/merged", display_name="overlay", fstype="ext4"),
        make_record("/containers", fstype="fuse-overlayfs"),
        make_record("/data", fstype="xfs"),
    ]

    assert _mps(filter_mounts(records, FilterConfig())) == ["/", "/snapshots", "/data"]


def test_excluded_by_names_first_matching_rule(make_record) -> None:
    assert excluded_by(make_record("/snap/x", fstype="overlay"), DEFAULT_RULES) == "overlay"
    assert excluded_by(make_record("/snap/x"), DEFAULT_RULES) == "snap"
    assert excluded_by(make_record("/home"), DEFAULT_RULES) is None


def test_rules_are_overridable(make_record) -> None:
    records = [make_record("/snap/foo"), make_record("/media/ro")]

    assert _mps(filter_mounts(records, FilterConfig(rules=()))) == ["/snap/foo", "/media/ro"]
    cfg = FilterConfig(rules=(snap_rule(["/media"]),))
    assert _mps(filter_mounts(records, cfg)) == ["/snap/foo"]


def test_order_is_preserved(make_record) -> None:
    records = [make_record("/z"), make_record("/a"), make_record("/m")]
    cfg = FilterConfig.from_cli("/m, /z ,/a", None)

    assert _mps(filter_mounts(records, cfg)) == ["/z", "/a", "/m"]


def test_empty_result_is_fine(make_record) -> None:
    cfg = FilterConfig.from_cli("/nope", None)
    assert filter_mounts([make_record("/")], cfg) == []
    assert filter_mounts([], FilterConfig()) == []


def test_parse_mount_list() -> None:
    assert parse_mount_list(None) == frozenset()
    assert parse_mount_list("") == frozenset()
    assert parse_mount_list(" /, /home ,,/data ") == frozenset({"/", "/home", "/data"})


def test_blank_only_means_no_allow_list() -> None:
    assert FilterConfig.from_cli(" , ", None).only is None


def test_under_prefix_honors_path_boundary() -> None:
    assert under_prefix("/snap", "/snap")
    assert under_prefix("/snap/foo", "/snap/")
    assert not under_prefix("/snapshots", "/snap")
    assert under_prefix("/anything", "/")


MOUNTS = ["/", "/home", "/boot", "/snap/a", "/var/snap/b", "/data", "/docker/overlay/x"]


@given(
    st.lists(st.sampled_from(MOUNTS), unique=True),
    st.lists(st.sampled_from(MOUNTS)),
    st.lists(st.sampled_from(MOUNTS)),
)
def test_filter_is_idempotent(mounts, only, exclude) -> None:
    records = [MountRecord(mount_point=m, display_name=m, total_bytes=10, free_bytes=5) for m in mounts]
    cfg = FilterConfig.from_cli(",".join(only), ",".join(exclude))

    once = filter_mounts(records, cfg)
    assert filter_mounts(once, cfg) == once


def test_dropped_mounts_are_logged(make_record, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ndf")
    records = [make_record("/"), make_record("/snap/foo"), make_record("/home"), make_record("/data")]

    filter_mounts(records, FilterConfig.from_cli("/,/snap/foo,/home", "/home"))

    assert caplog.messages == [
        "drop /snap/foo: built-in rule 'snap'",
        "drop /home: in --exclude-mp",
        "drop /data: not in --only-mp",
    ]
