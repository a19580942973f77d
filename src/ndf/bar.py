from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from rich.text import Text

FILLED_GLYPH = "█"
EMPTY_GLYPH = "░"

HIGH_USAGE_RATIO = 0.80
STYLE_HIGH = "red"
STYLE_NORMAL = "green"


@dataclass(frozen=True)
class BarRender:
    # (glyphs, style) pairs; style None = uncolored
    segments: Tuple[Tuple[str, Optional[str]], ...]
    percent: int
    high_usage: bool

    @property
    def percent_label(self) -> str:
        return f"{self.percent}%"

    @property
    def tag(self) -> str:
        return "high-usage" if self.high_usage else "normal"

    @property
    def width(self) -> int:
        return sum(len(s) for s, _ in self.segments)

    def text(self) -> Text:
        out = Text()
        for glyphs, style in self.segments:
            out.append(glyphs, style=style)
        return out


def clamp_ratio(ratio: float) -> float:
    if math.isnan(ratio):
        return 0.0
    return min(1.0, max(0.0, ratio))


def render_bar(ratio: float, bar_width: int) -> BarRender:
    """
    Fixed-width usage bar.
    - filled = round(ratio * width), rest is empty glyphs
    - ratio >= 0.80 -> filled part red, else green; empty part never colored
    """
    ratio = clamp_ratio(ratio)
    width = max(0, int(bar_width))
    filled = min(width, int(round(ratio * width)))
    percent = int(round(ratio * 100))
    high = ratio >= HIGH_USAGE_RATIO

    segments = []
    if filled:
        segments.append((FILLED_GLYPH * filled, STYLE_HIGH if high else STYLE_NORMAL))
    if width - filled:
        segments.append((EMPTY_GLYPH * (width - filled), None))
    return BarRender(segments=tuple(segments), percent=percent, high_usage=high)
