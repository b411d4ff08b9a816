"""Host load (TPS) tracking for a profiling session.

The profiler never computes load itself. A host supplies either a sampler
callable, polled on a background thread, or pushes values with
:meth:`LoadMonitor.update`. When a sample cannot be taken the last known
value stands.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

LoadSampler = Callable[[], float]


def is_usable_load(value: Optional[float]) -> bool:
    """A load sample is usable when it is a finite, non-negative number."""
    return value is not None and math.isfinite(value) and value >= 0


class LoadMonitor:
    def __init__(
        self,
        sampler: Optional[LoadSampler] = None,
        interval_seconds: float = 1.0,
        low_threshold: float = 18.0,
        default_load: float = 20.0,
    ) -> None:
        self.sampler = sampler
        self.interval_seconds = interval_seconds
        self.low_threshold = low_threshold
        self._current = default_load
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def current(self) -> float:
        """Last known load."""
        with self._lock:
            return self._current

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def update(self, value: float) -> float:
        """Accept a load value pushed by the host; returns the current load."""
        try:
            load = float(value)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric load sample %r", value)
            return self.current
        if not is_usable_load(load):
            logger.debug("Ignoring invalid load sample %r", value)
            return self.current

        with self._lock:
            self._current = load
        if load < self.low_threshold:
            logger.warning(
                "Low TPS detected: %.2f (threshold: %.2f)", load, self.low_threshold
            )
        return load

    def sample(self) -> float:
        """Poll the sampler once; keeps the last value if polling fails."""
        if self.sampler is None:
            return self.current
        try:
            value = self.sampler()
        except Exception as exc:
            logger.debug("Load sampling failed, keeping last value: %s", exc)
            return self.current
        return self.update(value)

    def start(self) -> bool:
        """Start background sampling. Needs a sampler; idempotent."""
        if self.sampler is None or self.running:
            return False
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="skript-profiler-load", daemon=True
        )
        self._thread.start()
        return True

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval_seconds + 1.0)

    def _run(self) -> None:
        while not self._stop.is_set():
            self.sample()
            self._stop.wait(self.interval_seconds)
