"""Data models for bfree."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

KIB_PER_GIB = 1024 * 1024

# Counter name in the source -> MemorySnapshot field
COUNTER_FIELDS: dict[str, str] = {
    "MemTotal": "total",
    "MemFree": "free",
    "MemAvailable": "available",
    "Buffers": "buffers",
    "Cached": "cached",
    "Shmem": "shared",
    "SwapTotal": "swap_total",
    "SwapFree": "swap_free",
}


def to_gibibytes(kib: int) -> float:
    """Convert kibibytes to gibibytes (display only)."""
    return kib / 1024 / 1024


class ColorRole(Enum):
    """Symbolic color tags for the displayed categories."""

    CRITICAL = "critical"
    CAUTION = "caution"
    NEUTRAL = "neutral"
    SAFE = "safe"


@dataclass(slots=True, frozen=True)
class MemorySnapshot:
    """
    Immutable memory counters for one observation instant, in KiB.

    Use from_counters() to build one from source data: it floors negative
    values to 0. The plain constructor does not validate its fields.
    """

    total: int = 0
    free: int = 0
    available: int = 0
    buffers: int = 0
    cached: int = 0
    shared: int = 0
    swap_total: int = 0
    swap_free: int = 0

    @classmethod
    def from_counters(cls, counters: Mapping[str, int]) -> "MemorySnapshot":
        """
        Build a snapshot from a parsed counter mapping.

        Only the known counter names are read; anything else in the mapping
        is ignored. Missing counters default to 0, so this never fails for a
        mapping of names to integers.
        """
        values = {
            field: max(0, int(counters.get(key, 0)))
            for key, field in COUNTER_FIELDS.items()
        }
        return cls(**values)

    @property
    def used(self) -> int:
        """Memory in use, saturating at 0 for inconsistent counters."""
        return max(0, self.total - self.free - self.buffers - self.cached)

    @property
    def cached_display(self) -> int:
        """Page cache with buffers folded in."""
        return self.cached + self.buffers

    @property
    def swap_used(self) -> int:
        """Swap in use, saturating at 0."""
        return max(0, self.swap_total - self.swap_free)


@dataclass(slots=True, frozen=True)
class DerivedMetrics:
    """Quantities computed from a MemorySnapshot."""

    used: int
    cached_display: int

    @staticmethod
    def gib(kib: int) -> float:
        """Convert kibibytes to gibibytes."""
        return to_gibibytes(kib)


def derive(snapshot: MemorySnapshot) -> DerivedMetrics:
    """Compute the derived metrics of a snapshot."""
    return DerivedMetrics(used=snapshot.used, cached_display=snapshot.cached_display)


@dataclass(slots=True, frozen=True)
class CategoryBar:
    """One displayed memory category, sized for a given bar width."""

    name: str
    value_kib: int
    percent_of_total: int  # may exceed 100 for inconsistent counters
    bar_cells: int
    color_role: ColorRole
    display_value: str


@dataclass(slots=True, frozen=True)
class BarLayout:
    """Ordered category bars computed for one tick."""

    bars: tuple[CategoryBar, ...]
    width: int
    total_kib: int
    total_display: str
