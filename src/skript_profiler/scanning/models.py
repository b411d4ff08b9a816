"""Structural facts extracted from one script file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class WaitStatement:
    amount: int
    unit: str  # as written: "tick", "seconds", "Minute"...

    def __str__(self) -> str:
        return f"{self.amount} {self.unit}"


@dataclass(frozen=True)
class ScriptInfo:
    """Analysis result for one script, keyed by its absolute path.

    Line numbers are 1-based, matching MetricKey.line_number.
    """

    file_path: str
    file_name: str
    lines: tuple[str, ...]
    labels: dict[int, tuple[str, ...]] = field(default_factory=dict)
    loop_lines: tuple[int, ...] = ()
    waits: dict[int, WaitStatement] = field(default_factory=dict)
    event_count: int = 0
    function_count: int = 0
    command_count: int = 0
    loop_count: int = 0
    variable_access_count: int = 0

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_content(self, line_number: int) -> str:
        if 0 < line_number <= len(self.lines):
            return self.lines[line_number - 1]
        return ""

    def label_at(self, line_number: int) -> Optional[str]:
        """Every structural label on a line, or None if nothing matched."""
        labels = self.labels.get(line_number)
        if not labels:
            return None
        return " | ".join(labels)
