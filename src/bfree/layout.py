"""Proportional bar layout for the memory categories."""

import math
from collections.abc import Callable

from bfree.models import BarLayout, CategoryBar, ColorRole, MemorySnapshot, to_gibibytes

# Displayed categories, in render order
CATEGORIES: tuple[tuple[str, Callable[[MemorySnapshot], int], ColorRole], ...] = (
    ("Used", lambda s: s.used, ColorRole.CRITICAL),
    ("Available", lambda s: s.available, ColorRole.CAUTION),
    ("Cached", lambda s: s.cached_display, ColorRole.NEUTRAL),
    ("Free", lambda s: s.free, ColorRole.SAFE),
)


def percent(value: int, total: int) -> int:
    """
    Integer percentage of value against total.

    Returns 0 when total is 0. Values larger than total give results above
    100; they are reported as-is.
    """
    if total == 0:
        return 0
    return value * 100 // total


def bar_cells(value_kib: int, total_kib: int, width: int) -> int:
    """
    Number of cells a category fills in a bar of the given width.

    Rounds up so that any nonzero value shows at least one cell, then clamps
    the result to [0, width].
    """
    width = max(0, width)
    if total_kib <= 0:
        return 0
    fraction = to_gibibytes(value_kib) / to_gibibytes(total_kib)
    cells = math.ceil(fraction * width)
    return min(max(cells, 0), width)


def format_gibibytes(kib: int) -> str:
    """Format a KiB quantity as a GiB string."""
    return f"{to_gibibytes(kib):.2f} GiB"


def build_layout(snapshot: MemorySnapshot, width: int) -> BarLayout:
    """Compute the category bars of a snapshot for a bar of `width` cells."""
    width = max(0, width)
    bars: list[CategoryBar] = []
    for name, getter, role in CATEGORIES:
        value = getter(snapshot)
        bars.append(
            CategoryBar(
                name=name,
                value_kib=value,
                percent_of_total=percent(value, snapshot.total),
                bar_cells=bar_cells(value, snapshot.total, width),
                color_role=role,
                display_value=format_gibibytes(value),
            )
        )
    return BarLayout(
        bars=tuple(bars),
        width=width,
        total_kib=snapshot.total,
        total_display=format_gibibytes(snapshot.total),
    )
