"""Run metrics: outcome counters and per-operation timings.

Example:
    metrics = RunMetrics()

    with metrics.measure("Data Loading"):
        inputs = resolver.load_inputs()

    metrics.display_dashboard()
"""

import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

__all__ = ["RunMetrics"]


class RunMetrics:
    """Counters and timings for a single import run."""

    def __init__(self):
        self.success = 0
        self.warnings = 0
        self.errors = 0
        self.db_operations = 0
        self.cache_hits = 0
        self.timings: Dict[str, Dict[str, Any]] = {}
        self.active_timers: Dict[str, float] = {}

    # -- counters ---------------------------------------------------------

    def count_success(self) -> None:
        self.success += 1

    def count_warning(self) -> None:
        self.warnings += 1

    def count_error(self) -> None:
        self.errors += 1

    def count_db_operation(self) -> None:
        self.db_operations += 1

    def count_cache_hit(self) -> None:
        self.cache_hits += 1

    # -- timers -----------------------------------------------------------

    def start(self, operation: str) -> None:
        """Start timing an operation."""
        self.active_timers[operation] = time.perf_counter()

    def end(self, operation: str) -> float:
        """End timing and return duration in seconds."""
        if operation not in self.active_timers:
            return 0.0

        duration = time.perf_counter() - self.active_timers.pop(operation)
        self.record(operation, duration)
        return duration

    def record(self, operation: str, duration: float) -> None:
        """Add one measured duration, for operations timed concurrently."""
        if operation not in self.timings:
            self.timings[operation] = {
                "count": 0,
                "total_seconds": 0.0,
                "min_seconds": float("inf"),
                "max_seconds": 0.0,
            }

        stats = self.timings[operation]
        stats["count"] += 1
        stats["total_seconds"] += duration
        stats["min_seconds"] = min(stats["min_seconds"], duration)
        stats["max_seconds"] = max(stats["max_seconds"], duration)

    @contextmanager
    def measure(self, operation: str) -> Iterator[None]:
        """Context manager for timing an operation."""
        self.start(operation)
        try:
            yield
        finally:
            self.end(operation)

    def operation_counts(self) -> Dict[str, int]:
        """Invocation count per timed operation, in first-seen order."""
        return {op: stats["count"] for op, stats in self.timings.items()}

    def get_all(self) -> Dict[str, Any]:
        """Snapshot of counters and timings, JSON serializable."""
        operations = {}
        for op, stats in self.timings.items():
            operations[op] = {
                "count": stats["count"],
                "total_seconds": round(stats["total_seconds"], 3),
                "avg_seconds": round(stats["total_seconds"] / stats["count"], 3) if stats["count"] > 0 else 0,
                "min_seconds": round(stats["min_seconds"], 3) if stats["min_seconds"] != float("inf") else 0,
                "max_seconds": round(stats["max_seconds"], 3),
            }

        return {
            "success": self.success,
            "warnings": self.warnings,
            "errors": self.errors,
            "db_operations": self.db_operations,
            "cache_hits": self.cache_hits,
            "operations": operations,
        }

    def display_dashboard(self, out: Optional[Callable[[str], None]] = None) -> None:
        """Print the performance dashboard."""
        out = out or print
        out("\n📊 Performance Dashboard:")
        out("━" * 40)
        out(f"✅ Success Operations: {self.success}")
        out(f"⚠️ Warnings: {self.warnings}")
        out(f"❌ Errors: {self.errors}")
        out(f"🗄️ Database Operations: {self.db_operations}")
        out(f"⚡ Cache Hits: {self.cache_hits}")

        counts = self.operation_counts()
        if counts:
            out("\n🔄 Operation Counts:")
            for name, count in counts.items():
                out(f"   {name}: {count}x")

    def reset(self) -> None:
        """Reset all counters and timings."""
        self.success = self.warnings = self.errors = 0
        self.db_operations = self.cache_hits = 0
        self.timings.clear()
        self.active_timers.clear()
