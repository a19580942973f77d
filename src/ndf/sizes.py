from __future__ import annotations

from typing import Tuple

UNITS: Tuple[str, ...] = ("B", "K", "M", "G", "T", "P")


def format_size(n: int) -> str:
    """Human friendly byte count (e.g. 512B / 1.00K / 926.35G)."""
    n = max(0, int(n))
    if n < 1024:
        return f"{n}B"

    value = float(n)
    for unit in UNITS:
        if value < 1024 or unit == UNITS[-1]:
            break
        value /= 1024
    return f"{value:.2f}{unit}"
