"""Memory counter sources for bfree."""

import logging
from pathlib import Path
from typing import Protocol

import psutil

from bfree.models import MemorySnapshot

logger = logging.getLogger(__name__)

MEMINFO_PATH = "/proc/meminfo"
MAX_COUNTER = 2**64 - 1  # kernel counters are u64


class SourceUnavailable(Exception):
    """The memory counter source could not be read."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class CounterSource(Protocol):
    """Anything that can produce a counter-name -> KiB mapping."""

    def read_counters(self) -> dict[str, int]: ...


def parse_meminfo(text: str) -> dict[str, int]:
    """
    Parse /proc/meminfo style text into a mapping of counter name to value.

    Each line looks like ``MemTotal:       16384000 kB``. Only the leading
    integer token of the value is used. Lines that don't parse, or whose
    value falls outside the u64 range, are skipped.
    """
    counters: dict[str, int] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        key, sep, rest = line.partition(":")
        tokens = rest.split()
        key = key.strip()
        if not sep or not key or not tokens:
            logger.debug("Skipping malformed meminfo line %d: %r", lineno, line)
            continue
        try:
            value = int(tokens[0])
        except ValueError:
            logger.debug("Skipping malformed meminfo line %d: %r", lineno, line)
            continue
        if not 0 <= value <= MAX_COUNTER:
            logger.debug("Skipping out of range meminfo line %d: %r", lineno, line)
            continue
        counters[key] = value
    return counters


class MeminfoSource:
    """Reads counters from a meminfo file (Linux)."""

    def __init__(self, path: str | Path = MEMINFO_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read_counters(self) -> dict[str, int]:
        """Read and parse the meminfo file."""
        try:
            text = self._path.read_text()
        except OSError as exc:
            raise SourceUnavailable(str(self._path), exc.strerror or str(exc)) from exc
        return parse_meminfo(text)

    def __repr__(self) -> str:
        return f"MeminfoSource({str(self._path)!r})"


class PsutilSource:
    """
    Reads counters through psutil, for platforms without /proc/meminfo.

    psutil reports bytes; values are converted to KiB. Fields the platform
    does not report (e.g. buffers on macOS) are left out of the mapping.
    """

    # psutil attribute -> counter name
    _VIRTUAL_FIELDS = {
        "total": "MemTotal",
        "free": "MemFree",
        "available": "MemAvailable",
        "buffers": "Buffers",
        "cached": "Cached",
        "shared": "Shmem",
    }
    _SWAP_FIELDS = {
        "total": "SwapTotal",
        "free": "SwapFree",
    }

    def read_counters(self) -> dict[str, int]:
        """Collect memory and swap counters from psutil."""
        try:
            mem = psutil.virtual_memory()
            swap = psutil.swap_memory()
        except (OSError, psutil.Error) as exc:
            raise SourceUnavailable("psutil", str(exc)) from exc

        counters: dict[str, int] = {}
        for stats, fields in ((mem, self._VIRTUAL_FIELDS), (swap, self._SWAP_FIELDS)):
            for attr, key in fields.items():
                value = getattr(stats, attr, None)
                if value is not None:
                    counters[key] = int(value) // 1024
        return counters

    def __repr__(self) -> str:
        return "PsutilSource()"


def default_source(kind: str = "auto", meminfo_path: str | Path = MEMINFO_PATH) -> CounterSource:
    """
    Pick a counter source.

    Args:
        kind: "meminfo", "psutil" or "auto" (meminfo when the file exists).
        meminfo_path: File read by the meminfo source.
    """
    if kind == "meminfo":
        return MeminfoSource(meminfo_path)
    if kind == "psutil":
        return PsutilSource()
    if kind == "auto":
        if Path(meminfo_path).exists():
            return MeminfoSource(meminfo_path)
        logger.info("%s not found, falling back to psutil", meminfo_path)
        return PsutilSource()
    raise ValueError(f"Unknown source kind: {kind!r}")


class MemoryMonitor:
    """
    Produces a fresh MemorySnapshot from a counter source on each refresh.

    Nothing is kept between refreshes. Read failures are not retried here:
    SourceUnavailable propagates to the caller.
    """

    def __init__(self, source: CounterSource | None = None) -> None:
        """
        Initialize the MemoryMonitor.

        Args:
            source: Counter source to read from. Defaults to default_source().
        """
        self._source = source if source is not None else default_source()

    @property
    def source(self) -> CounterSource:
        """Get the counter source."""
        return self._source

    def refresh(self) -> MemorySnapshot:
        """Read the source and build a new snapshot."""
        counters = self._source.read_counters()
        snapshot = MemorySnapshot.from_counters(counters)
        logger.debug("Refreshed snapshot from %r: %s", self._source, snapshot)
        return snapshot
