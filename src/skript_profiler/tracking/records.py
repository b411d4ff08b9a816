"""Metric records: per-element execution statistics.

A :class:`MetricRecord` is the mutable, shared accumulator for one tracked
element. Writers on many threads update it; readers take a
:class:`RecordSnapshot`, a frozen copy read under the same lock the writers
use, so count and total always belong to the same moment.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

NANOS_PER_MILLI = 1_000_000


@dataclass(frozen=True, order=True)
class MetricKey:
    """Identity of a tracked element: where it lives and what it is."""

    source_file: str
    line_number: int
    element_kind: str

    @property
    def location(self) -> str:
        return f"{self.source_file}:{self.line_number}"


@dataclass(frozen=True)
class RecordSnapshot:
    """Point-in-time copy of a MetricRecord."""

    key: MetricKey
    element_name: str
    execution_count: int
    total_time_ns: int
    max_time_ns: int
    min_time_ns: Optional[int]  # None until a positive duration is seen

    @property
    def source_file(self) -> str:
        return self.key.source_file

    @property
    def line_number(self) -> int:
        return self.key.line_number

    @property
    def element_kind(self) -> str:
        return self.key.element_kind

    @property
    def location(self) -> str:
        return self.key.location

    @property
    def average_ms(self) -> float:
        if self.execution_count == 0:
            return 0.0
        return (self.total_time_ns / self.execution_count) / NANOS_PER_MILLI

    @property
    def total_ms(self) -> float:
        return self.total_time_ns / NANOS_PER_MILLI

    @property
    def max_ms(self) -> float:
        return self.max_time_ns / NANOS_PER_MILLI

    @property
    def min_ms(self) -> float:
        if self.min_time_ns is None:
            return 0.0
        return self.min_time_ns / NANOS_PER_MILLI


class MetricRecord:
    """Thread-safe statistics for every span sharing one MetricKey.

    The count only ever grows. Min and max track positive durations
    only: a zero or negative duration (clock skew, or a caller that could not
    time the span) still counts as an execution but leaves them alone.
    """

    __slots__ = (
        "key",
        "element_name",
        "_lock",
        "_count",
        "_total_ns",
        "_max_ns",
        "_min_ns",
    )

    def __init__(self, key: MetricKey, element_name: str = "") -> None:
        self.key = key
        self.element_name = element_name or key.element_kind
        self._lock = threading.Lock()
        self._count = 0
        self._total_ns = 0
        self._max_ns = 0
        self._min_ns: Optional[int] = None

    def record(self, duration_ns: int) -> None:
        """Add one timed execution."""
        with self._lock:
            self._count += 1
            self._total_ns += duration_ns
            if duration_ns > 0:
                if duration_ns > self._max_ns:
                    self._max_ns = duration_ns
                if self._min_ns is None or duration_ns < self._min_ns:
                    self._min_ns = duration_ns

    def record_occurrence(self) -> None:
        """Add one execution whose duration is unknown."""
        with self._lock:
            self._count += 1

    @property
    def execution_count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> RecordSnapshot:
        with self._lock:
            return RecordSnapshot(
                key=self.key,
                element_name=self.element_name,
                execution_count=self._count,
                total_time_ns=self._total_ns,
                max_time_ns=self._max_ns,
                min_time_ns=self._min_ns,
            )

    def __repr__(self) -> str:
        return f"MetricRecord({self.key.location} {self.key.element_kind}, count={self._count})"
