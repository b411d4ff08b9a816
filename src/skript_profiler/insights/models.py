"""Data models for detected performance issues."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from ..tracking.records import RecordSnapshot


class Severity(IntEnum):
    """Ordered severity: comparisons and sorting follow urgency."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name


class IssueKind(Enum):
    SLOW_EVENT = "slow-event"
    INEFFICIENT_LOOP = "inefficient-loop"
    LONG_WAIT = "long-wait"
    EXCESSIVE_VARIABLES = "excessive-variables"
    HIGH_FREQUENCY = "high-frequency"
    LOAD_IMPACT = "load-impact"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    IssueKind.SLOW_EVENT: "Slow Event Execution",
    IssueKind.INEFFICIENT_LOOP: "Inefficient Loop",
    IssueKind.LONG_WAIT: "Excessive Wait/Delay",
    IssueKind.EXCESSIVE_VARIABLES: "Excessive Variable Access",
    IssueKind.HIGH_FREQUENCY: "High Execution Frequency",
    IssueKind.LOAD_IMPACT: "Load Impact Detected",
}


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    severity: Severity
    script_file: str
    line_number: int
    description: str
    suggestion: str
    record: Optional[RecordSnapshot] = None  # the record that triggered it, if any

    @property
    def location(self) -> str:
        return f"{self.script_file}:{self.line_number}"
