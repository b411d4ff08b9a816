"""Bottleneck detection over runtime records and script facts."""

from .detector import TICKS_PER_UNIT, BottleneckDetector, wait_to_ticks
from .models import Issue, IssueKind, Severity

__all__ = [
    "BottleneckDetector",
    "Issue",
    "IssueKind",
    "Severity",
    "TICKS_PER_UNIT",
    "wait_to_ticks",
]
