from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from rich.cells import cell_len
from rich.text import Text

from ndf.bar import render_bar
from ndf.collectors.disk import MountRecord, printable
from ndf.sizes import format_size


class DisplayMode(str, Enum):
    NORMAL = "normal"
    COMPACT = "compact"
    TABLE = "table"


NORMAL_BAR_WIDTH = 48
COMPACT_BAR_WIDTH = 30
TABLE_MIN_BAR_WIDTH = 10

EMPTY_NOTICE = "No mounts matched."

HEADERS = ("Mount", "Size", "Free", "Usage", "Name")
RIGHT_ALIGNED = {"Size", "Free"}
PERCENT_WIDTH = len("100%")
# "│ " + " │ " * 4 + " │"
BORDER_OVERHEAD = 3 * len(HEADERS) + 1


def usage_cell(rec: MountRecord, bar_width: int) -> Text:
    """bar + space + right-aligned percent."""
    bar = render_bar(rec.usage_ratio, bar_width)
    out = bar.text()
    out.append(" " + bar.percent_label.rjust(PERCENT_WIDTH))
    return out


def _empty_notice() -> List[Text]:
    return [Text(EMPTY_NOTICE, style="dim")]


def render_normal(records: Sequence[MountRecord], bar_width: int = NORMAL_BAR_WIDTH) -> List[Text]:
    """Two lines per mount (`name @ mount`, then the bar), blank line between mounts."""
    if not records:
        return _empty_notice()

    lines: List[Text] = []
    for i, rec in enumerate(records):
        if i:
            lines.append(Text(""))
        lines.append(Text.assemble((printable(rec.display_name), "bold"), " @ ", printable(rec.mount_point)))
        bar = render_bar(rec.usage_ratio, bar_width)
        line = bar.text()
        line.append(" " + bar.percent_label)
        lines.append(line)
    return lines


def render_compact(records: Sequence[MountRecord], bar_width: int = COMPACT_BAR_WIDTH) -> List[Text]:
    if not records:
        return _empty_notice()

    lines: List[Text] = []
    for rec in records:
        bar = render_bar(rec.usage_ratio, bar_width)
        line = Text(f"{printable(rec.display_name)}: ")
        line.append_text(bar.text())
        line.append(" " + bar.percent_label)
        lines.append(line)
    return lines


@dataclass(frozen=True)
class ColumnPlan:
    mount: int
    size: int
    free: int
    usage: int
    name: int
    bar: int

    def widths(self) -> List[int]:
        return [self.mount, self.size, self.free, self.usage, self.name]

    @property
    def total_width(self) -> int:
        return sum(self.widths()) + BORDER_OVERHEAD


def _col_width(header: str, values: Sequence[str]) -> int:
    return max([cell_len(header)] + [cell_len(v) for v in values])


def plan_columns(
    records: Sequence[MountRecord],
    terminal_width: int,
    min_bar_width: int = TABLE_MIN_BAR_WIDTH,
) -> ColumnPlan:
    """
    Column widths for the table layout.
    - Mount/Size/Free/Name: widest of header and values
    - Usage: whatever the terminal has left, bar never below min_bar_width
      (wider than the terminal is allowed)
    """
    mount_w = _col_width("Mount", [printable(r.mount_point) for r in records])
    size_w = _col_width("Size", [format_size(r.total_bytes) for r in records])
    free_w = _col_width("Free", [format_size(r.free_bytes) for r in records])
    name_w = _col_width("Name", [printable(r.display_name) for r in records])

    fixed = mount_w + size_w + free_w + name_w + BORDER_OVERHEAD
    # usage cell = bar + " " + percent
    bar_w = max(min_bar_width, terminal_width - fixed - 1 - PERCENT_WIDTH)
    usage_w = max(len("Usage"), bar_w + 1 + PERCENT_WIDTH)

    return ColumnPlan(mount=mount_w, size=size_w, free=free_w, usage=usage_w, name=name_w, bar=bar_w)


def _border(plan: ColumnPlan, left: str, mid: str, right: str) -> Text:
    return Text(left + mid.join("─" * (w + 2) for w in plan.widths()) + right)


def _row(cells: Sequence[Text], plan: ColumnPlan) -> Text:
    line = Text("│")
    for header, cell, width in zip(HEADERS, cells, plan.widths()):
        pad = " " * max(0, width - cell.cell_len)
        line.append(" ")
        if header in RIGHT_ALIGNED:
            line.append(pad)
            line.append_text(cell)
        else:
            line.append_text(cell)
            line.append(pad)
        line.append(" │")
    return line


def render_table(
    records: Sequence[MountRecord],
    terminal_width: int,
    min_bar_width: int = TABLE_MIN_BAR_WIDTH,
) -> List[Text]:
    plan = plan_columns(records, terminal_width, min_bar_width=min_bar_width)

    lines = [
        _border(plan, "┌", "┬", "┐"),
        _row([Text(h, style="bold") for h in HEADERS], plan),
        _border(plan, "├", "┼", "┤"),
    ]
    for rec in records:
        cells = [
            Text(printable(rec.mount_point)),
            Text(format_size(rec.total_bytes)),
            Text(format_size(rec.free_bytes)),
            usage_cell(rec, plan.bar),
            Text(printable(rec.display_name)),
        ]
        lines.append(_row(cells, plan))
    lines.append(_border(plan, "└", "┴", "┘"))
    return lines


def render(
    mode: DisplayMode,
    records: Sequence[MountRecord],
    terminal_width: int,
    normal_bar_width: int = NORMAL_BAR_WIDTH,
    compact_bar_width: int = COMPACT_BAR_WIDTH,
    table_min_bar_width: int = TABLE_MIN_BAR_WIDTH,
) -> List[Text]:
    mode = DisplayMode(mode)
    if mode is DisplayMode.NORMAL:
        return render_normal(records, bar_width=normal_bar_width)
    if mode is DisplayMode.COMPACT:
        return render_compact(records, bar_width=compact_bar_width)
    if mode is DisplayMode.TABLE:
        return render_table(records, terminal_width, min_bar_width=table_min_bar_width)
    raise ValueError(f"unsupported display mode: {mode!r}")
