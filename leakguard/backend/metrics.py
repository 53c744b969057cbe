"""
backend/metrics.py

Lightweight thread-safe counters for the analysis pipeline.
No external dependencies: uses Python's threading.Lock.

Usage:
    from backend.metrics import METRICS
    METRICS.uploads_received.inc()
    print(METRICS.as_dict())
"""

import threading


class Counter:
    """A thread-safe integer counter."""

    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    def reset(self) -> None:
        with self._lock:
            self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def __repr__(self) -> str:  # pragma: no cover
        return f"Counter({self._value})"


class Metrics:
    """Singleton holding all pipeline counters."""

    def __init__(self) -> None:
        # --- Upload boundary ---
        self.uploads_received: Counter = Counter()
        """Files handed to the session for analysis."""

        self.uploads_rejected: Counter = Counter()
        """Uploads refused before parsing (extension, size, encoding, busy)."""

        # --- Analysis ---
        self.analyses_completed: Counter = Counter()
        self.analyses_failed: Counter = Counter()

        self.rows_classified: Counter = Counter()
        """Data rows passed through the RowClassifier."""

        self.models_trained: Counter = Counter()

        self.fallback_samples: Counter = Counter()
        """Analyses where nothing was flagged and sample threats were injected."""

        # --- Output ---
        self.reports_generated: Counter = Counter()

    def as_dict(self) -> dict:
        """Return all counters as a plain dict (safe for JSON serialisation)."""
        return {
            name: attr.value
            for name, attr in vars(self).items()
            if isinstance(attr, Counter)
        }

    def reset_all(self) -> None:
        """Reset every counter to zero (useful in tests)."""
        for attr in vars(self).values():
            if isinstance(attr, Counter):
                attr.reset()


# Module-level singleton: import from here everywhere
METRICS = Metrics()
