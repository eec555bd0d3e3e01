"""Tests for bfree data models."""

import pytest

from bfree.models import (
    COUNTER_FIELDS,
    DerivedMetrics,
    MemorySnapshot,
    derive,
    to_gibibytes,
)


def scenario_a() -> MemorySnapshot:
    return MemorySnapshot(
        total=16384000,
        free=8192000,
        available=10000000,
        buffers=200000,
        cached=4000000,
        shared=0,
        swap_total=0,
        swap_free=0,
    )


def test_memory_snapshot_creation():
    """Test MemorySnapshot dataclass creation."""
    snapshot = scenario_a()

    assert snapshot.total == 16384000
    assert snapshot.free == 8192000
    assert snapshot.available == 10000000
    assert snapshot.buffers == 200000
    assert snapshot.cached == 4000000
    assert snapshot.shared == 0
    assert snapshot.swap_total == 0
    assert snapshot.swap_free == 0


def test_memory_snapshot_is_frozen():
    """Test that MemorySnapshot is immutable (frozen)."""
    snapshot = scenario_a()

    with pytest.raises(AttributeError):
        snapshot.total = 1  # type: ignore[misc]


def test_memory_snapshot_uses_slots():
    """Test that MemorySnapshot uses __slots__."""
    assert not hasattr(scenario_a(), "__dict__")


def test_from_counters_reads_known_keys():
    """Test every known counter name lands in its field."""
    counters = {key: index + 1 for index, key in enumerate(COUNTER_FIELDS)}

    snapshot = MemorySnapshot.from_counters(counters)

    assert snapshot == MemorySnapshot(
        total=1,
        free=2,
        available=3,
        buffers=4,
        cached=5,
        shared=6,
        swap_total=7,
        swap_free=8,
    )


def test_from_counters_empty_mapping_defaults_to_zero():
    """Test a mapping with no known keys gives an all-zero snapshot."""
    assert MemorySnapshot.from_counters({}) == MemorySnapshot()


def test_from_counters_ignores_unknown_keys():
    """Test counters outside the known set are ignored."""
    snapshot = MemorySnapshot.from_counters(
        {"MemTotal": 1000, "HugePages_Total": 5, "SReclaimable": 300}
    )

    assert snapshot.total == 1000
    assert snapshot == MemorySnapshot(total=1000)


def test_from_counters_partial_mapping():
    """Test missing keys default to 0 without failing."""
    snapshot = MemorySnapshot.from_counters({"MemTotal": 2048, "MemFree": 1024})

    assert snapshot.total == 2048
    assert snapshot.free == 1024
    assert snapshot.available == 0
    assert snapshot.swap_free == 0


def test_from_counters_floors_negative_values():
    """Test negative counters become 0 so every field stays non-negative."""
    snapshot = MemorySnapshot.from_counters({"MemTotal": -5, "MemFree": -1})

    assert snapshot == MemorySnapshot()


def test_used_scenario_a():
    """Test used = total - free - buffers - cached."""
    assert scenario_a().used == 3992000


def test_used_saturates_at_zero():
    """Test used never goes negative when counters overlap total."""
    snapshot = MemorySnapshot(total=1000, free=800, buffers=300, cached=400)

    assert snapshot.used == 0


def test_used_zero_when_all_free():
    """Test used is 0 when free equals total."""
    snapshot = MemorySnapshot(total=4096, free=4096)

    assert snapshot.used == 0


def test_cached_display_includes_buffers():
    """Test buffers are folded into the cached category."""
    assert scenario_a().cached_display == 4200000


def test_cached_display_not_corrected_above_total():
    """Test cached_display may exceed total for inconsistent counters."""
    snapshot = MemorySnapshot(total=100, buffers=80, cached=80)

    assert snapshot.cached_display == 160


def test_swap_used():
    """Test swap_used is total minus free, saturating at 0."""
    assert MemorySnapshot(swap_total=2048, swap_free=512).swap_used == 1536
    assert MemorySnapshot(swap_total=0, swap_free=512).swap_used == 0


def test_to_gibibytes():
    """Test KiB to GiB conversion."""
    assert to_gibibytes(0) == 0.0
    assert to_gibibytes(1024 * 1024) == 1.0
    assert to_gibibytes(512 * 1024) == 0.5


def test_to_gibibytes_is_monotonic():
    """Test larger KiB values always give larger GiB values."""
    values = [0, 1, 2, 1023, 1024, 1048575, 1048576, 16384000, 2**40]
    converted = [to_gibibytes(value) for value in values]

    assert converted == sorted(converted)
    assert len(set(converted)) == len(converted)


def test_derive():
    """Test derived metrics for scenario A."""
    metrics = derive(scenario_a())

    assert metrics == DerivedMetrics(used=3992000, cached_display=4200000)
    assert metrics.gib(1024 * 1024) == 1.0


def test_derive_is_idempotent():
    """Test deriving twice from the same snapshot gives the same result."""
    snapshot = scenario_a()

    assert derive(snapshot) == derive(snapshot)
