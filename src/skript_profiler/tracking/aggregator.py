"""Concurrency-safe execution-time aggregator.

Recording entry points are called from many threads at once; the report side
reads through :meth:`ExecutionAggregator.snapshot`. The key map has one lock
that is held only to look up or insert a record. Each record carries its own
lock, so contention stays local to a single key.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Optional

from .records import MetricKey, MetricRecord, RecordSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpanHandle:
    """Returned by begin_span; hand it back to end_span."""

    identifier: str
    started_ns: int


class ExecutionAggregator:
    """Aggregates span timings per MetricKey for one profiling session.

    Observations arriving while no session is active are dropped. Callers
    should check :attr:`is_active`, but nothing breaks if they do not.

    Note:
        ``record_occurrence`` bumps the count without adding time, which
        pulls the average (total / count) down. Use it for keys that are
        only counted, not for keys that also receive timed spans.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        span_clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        self._clock = clock
        self._span_clock = span_clock
        self._records: dict[MetricKey, MetricRecord] = {}
        self._map_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._active = False
        self._started_at: Optional[float] = None
        self._ended_at: Optional[float] = None

    # ── Session window ────────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self._active

    def start_session(self) -> bool:
        """Begin accepting observations. Returns False if already active."""
        with self._state_lock:
            if self._active:
                return False
            self._started_at = self._clock()
            self._ended_at = None
            self._active = True
        logger.info("Execution tracking started")
        return True

    def stop_session(self) -> bool:
        """Stop accepting observations. Returns False if not active."""
        with self._state_lock:
            if not self._active:
                return False
            self._active = False
            self._ended_at = self._clock()
        logger.info("Execution tracking stopped")
        return True

    def session_duration_ms(self) -> float:
        """Elapsed session time: frozen once stopped, live while active."""
        with self._state_lock:
            if self._started_at is None:
                return 0.0
            end = self._clock() if self._ended_at is None else self._ended_at
            return max(0.0, (end - self._started_at) * 1000.0)

    def reset(self) -> bool:
        """Drop every record and the session window.

        Ignored while a session is active; stop first.
        """
        with self._state_lock:
            if self._active:
                logger.debug("Ignoring reset while a session is active")
                return False
            with self._map_lock:
                self._records.clear()
            self._started_at = None
            self._ended_at = None
        return True

    # ── Recording ─────────────────────────────────────────────────────

    def _record_for(self, key: MetricKey, element_name: str) -> Optional[MetricRecord]:
        """Existing record for ``key``, or a new one while a session is active.

        Returns None once the session has ended: nothing is inserted after stop.
        """
        record = self._records.get(key)
        if record is None:
            with self._map_lock:
                record = self._records.get(key)
                if record is None:
                    if not self._active:
                        return None
                    record = MetricRecord(key, element_name)
                    self._records[key] = record
        return record

    def record_span(self, key: MetricKey, duration_ns: int, element_name: str = "") -> None:
        """Add one timed execution of ``key``."""
        if not self._active:
            return
        record = self._record_for(key, element_name)
        if record is not None:
            record.record(int(duration_ns))

    def record_occurrence(self, key: MetricKey, element_name: str = "") -> None:
        """Count one execution of ``key`` without timing it."""
        if not self._active:
            return
        record = self._record_for(key, element_name)
        if record is not None:
            record.record_occurrence()

    def begin_span(self, identifier: str = "") -> SpanHandle:
        return SpanHandle(identifier=identifier, started_ns=self._span_clock())

    def end_span(
        self,
        handle: Optional[SpanHandle],
        source_file: str,
        line_number: int,
        element_kind: str,
        element_name: str = "",
    ) -> None:
        """Close a span opened with begin_span and record its duration."""
        if handle is None:
            return
        duration_ns = self._span_clock() - handle.started_ns
        key = MetricKey(source_file, line_number, element_kind)
        self.record_span(key, duration_ns, element_name or handle.identifier)

    @contextmanager
    def span(
        self,
        source_file: str,
        line_number: int,
        element_kind: str,
        element_name: str = "",
    ) -> Iterator[SpanHandle]:
        """Time the body of a ``with`` block as one span."""
        handle = self.begin_span(element_name)
        try:
            yield handle
        finally:
            self.end_span(handle, source_file, line_number, element_kind, element_name)

    # ── Reading ───────────────────────────────────────────────────────

    @property
    def record_count(self) -> int:
        with self._map_lock:
            return len(self._records)

    def snapshot(self) -> Mapping[MetricKey, RecordSnapshot]:
        """Read-only copy of every record, in first-observation order."""
        with self._map_lock:
            records = list(self._records.values())
        return MappingProxyType({record.key: record.snapshot() for record in records})
