"""
Performance counters for auto-import queries.

Each query gets a fresh ``PerfCounters``; the caller reads it once after the
query finished and then discards it.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator

logger = logging.getLogger(__name__)


class Stopwatch:
    """Monotonic millisecond clock started at construction."""

    def __init__(self) -> None:
        self._start = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0


@dataclass
class PerfCounters:
    """Per-phase timings and counts of one query."""

    # Timing metrics (milliseconds)
    total_time_ms: float = 0.0
    module_time_ms: float = 0.0
    index_time_ms: float = 0.0
    alias_time_ms: float = 0.0
    edit_time_ms: float = 0.0
    module_resolve_time_ms: float = 0.0

    # Counts
    symbol_count: int = 0
    index_count: int = 0
    user_index_count: int = 0
    alias_count: int = 0
    dropped_alias_count: int = 0

    index_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        return (
            f"total={self.total_time_ms:.1f}ms "
            f"modules={self.module_time_ms:.1f}ms index={self.index_time_ms:.1f}ms "
            f"alias={self.alias_time_ms:.1f}ms edits={self.edit_time_ms:.1f}ms "
            f"resolve={self.module_resolve_time_ms:.1f}ms "
            f"symbols={self.symbol_count} index_entries={self.index_count} "
            f"user_index_entries={self.user_index_count} aliases={self.alias_count}"
        )


@contextmanager
def accumulate_ms(counters: PerfCounters, attribute: str) -> Iterator[None]:
    """
    Add the wall time of the ``with`` body to ``counters.<attribute>``.

    The time is added even when the body raises.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = (time.perf_counter() - start) * 1000.0
        setattr(counters, attribute, getattr(counters, attribute) + elapsed)
