"""Performance accounting for auto-import queries."""

from .perf_counters import PerfCounters, Stopwatch, accumulate_ms

__all__ = ["PerfCounters", "Stopwatch", "accumulate_ms"]
