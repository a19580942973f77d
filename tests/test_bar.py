from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from ndf.bar import EMPTY_GLYPH, FILLED_GLYPH, render_bar


class TestRenderBarInvariants:
    @given(st.floats(min_value=0.0, max_value=1.0), st.integers(min_value=0, max_value=300))
    def test_width_and_fill_count(self, ratio: float, width: int) -> None:
        bar = render_bar(ratio, width)
        plain = bar.text().plain

        assert len(plain) == width
        assert bar.width == width
        assert plain.count(FILLED_GLYPH) == round(ratio * width)
        assert plain == FILLED_GLYPH * plain.count(FILLED_GLYPH) + EMPTY_GLYPH * plain.count(EMPTY_GLYPH)

    @given(st.floats(allow_nan=True, allow_infinity=True), st.integers(min_value=0, max_value=300))
    def test_out_of_range_ratio_never_overflows(self, ratio: float, width: int) -> None:
        bar = render_bar(ratio, width)
        filled = bar.text().plain.count(FILLED_GLYPH)

        assert 0 <= filled <= width
        assert 0 <= bar.percent <= 100


@pytest.mark.parametrize(
    "ratio, tag, style",
    [
        (0.80, "high-usage", "red"),
        (0.95, "high-usage", "red"),
        (1.0, "high-usage", "red"),
        (0.7999, "normal", "green"),
        (0.5, "normal", "green"),
    ],
)
def test_color_threshold(ratio: float, tag: str, style: str) -> None:
    bar = render_bar(ratio, 20)
    assert bar.tag == tag
    assert bar.segments[0][1] == style
    assert bar.text().spans[0].style == style


def test_empty_portion_is_never_colored() -> None:
    bar = render_bar(0.25, 8)
    assert bar.segments == ((FILLED_GLYPH * 2, "green"), (EMPTY_GLYPH * 6, None))


def test_zero_and_full() -> None:
    assert render_bar(0.0, 5).segments == ((EMPTY_GLYPH * 5, None),)
    assert render_bar(1.0, 5).segments == ((FILLED_GLYPH * 5, "red"),)


def test_percent_label() -> None:
    assert render_bar(0.672, 10).percent_label == "67%"
    assert render_bar(-3, 10).percent_label == "0%"
    assert render_bar(7, 10).percent_label == "100%"
    assert render_bar(float("nan"), 10).percent_label == "0%"
