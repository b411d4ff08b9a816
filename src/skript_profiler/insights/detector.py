"""Heuristic bottleneck detection.

Fuses runtime records with static script facts. Rules, in evaluation order:

1. SLOW_EVENT      max >= very slow threshold (CRITICAL), else avg >= slow (HIGH)
2. HIGH_FREQUENCY  count above the frequency threshold (HIGH if total time is large)
3. INEFFICIENT_LOOP  a loop line whose record ran more than the loop threshold
4. LONG_WAIT       a wait longer than the tick threshold
5. EXCESSIVE_VARIABLES  a file with too many variable accesses
6. LOAD_IMPACT     host load below threshold, blamed on the costliest record

Rules 1-2 run per record, 3-5 per script (lines in order, then the file
check), 6 once. The result is stably sorted by severity, so equal-severity
issues keep evaluation order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Optional

from ..config import ThresholdConfig
from ..monitor import is_usable_load
from ..scanning.models import ScriptInfo
from ..tracking.records import MetricKey, RecordSnapshot
from .models import Issue, IssueKind, Severity

logger = logging.getLogger(__name__)

TICKS_PER_UNIT = {
    "tick": 1,
    "second": 20,
    "minute": 1200,
}


def wait_to_ticks(amount: int, unit: str) -> Optional[int]:
    """Convert a wait to server ticks; None for an unknown unit."""
    unit = unit.lower()
    if unit.endswith("s"):
        unit = unit[:-1]
    ratio = TICKS_PER_UNIT.get(unit)
    if ratio is None:
        return None
    return amount * ratio


class BottleneckDetector:
    """Stateless: every call builds a fresh issue list from its inputs."""

    def detect(
        self,
        metrics: Mapping[MetricKey, RecordSnapshot],
        scripts: Mapping[str, ScriptInfo],
        thresholds: ThresholdConfig,
        current_load: Optional[float] = None,
    ) -> list[Issue]:
        issues: list[Issue] = []

        for record in metrics.values():
            issues.extend(self._check_record(record, thresholds))

        by_line = self._index_by_line(metrics)
        for script in scripts.values():
            issues.extend(self._check_script(script, by_line, thresholds))

        if is_usable_load(current_load):
            issues.extend(self._check_load(metrics, current_load, thresholds))

        issues.sort(key=lambda issue: issue.severity, reverse=True)
        logger.info("Analysis complete. Found %d potential issue(s)", len(issues))
        return issues

    # ── Runtime rules ─────────────────────────────────────────────────

    def _check_record(self, record: RecordSnapshot, thresholds: ThresholdConfig) -> list[Issue]:
        issues: list[Issue] = []
        avg_ms = record.average_ms
        max_ms = record.max_ms

        if max_ms >= thresholds.very_slow_execution_ms:
            issues.append(
                Issue(
                    kind=IssueKind.SLOW_EVENT,
                    severity=Severity.CRITICAL,
                    script_file=record.source_file,
                    line_number=record.line_number,
                    description=(
                        f"Very slow execution detected: {avg_ms:.2f}ms average, "
                        f"{max_ms:.2f}ms max"
                    ),
                    suggestion=(
                        "Consider optimizing this code block. Break down complex operations, "
                        "reduce database queries, or use async operations."
                    ),
                    record=record,
                )
            )
        elif avg_ms >= thresholds.slow_execution_ms:
            issues.append(
                Issue(
                    kind=IssueKind.SLOW_EVENT,
                    severity=Severity.HIGH,
                    script_file=record.source_file,
                    line_number=record.line_number,
                    description=f"Slow execution detected: {avg_ms:.2f}ms average",
                    suggestion=(
                        "Review this code for potential optimizations. "
                        "Consider caching results or reducing complexity."
                    ),
                    record=record,
                )
            )

        if record.execution_count > thresholds.high_frequency_count:
            total_ms = record.total_ms
            severity = (
                Severity.HIGH if total_ms > thresholds.high_frequency_total_ms else Severity.MEDIUM
            )
            issues.append(
                Issue(
                    kind=IssueKind.HIGH_FREQUENCY,
                    severity=severity,
                    script_file=record.source_file,
                    line_number=record.line_number,
                    description=(
                        f"High execution frequency: {record.execution_count} times "
                        f"({total_ms:.2f}ms total)"
                    ),
                    suggestion=(
                        "This code executes very frequently. "
                        "Even small optimizations can have significant impact."
                    ),
                    record=record,
                )
            )

        return issues

    # ── Script rules ──────────────────────────────────────────────────

    @staticmethod
    def _index_by_line(
        metrics: Mapping[MetricKey, RecordSnapshot],
    ) -> dict[tuple[str, int], RecordSnapshot]:
        """Exact (file, line) lookup; the first record seen for a line wins."""
        index: dict[tuple[str, int], RecordSnapshot] = {}
        for record in metrics.values():
            index.setdefault((record.source_file, record.line_number), record)
        return index

    def _check_script(
        self,
        script: ScriptInfo,
        by_line: dict[tuple[str, int], RecordSnapshot],
        thresholds: ThresholdConfig,
    ) -> list[Issue]:
        issues: list[Issue] = []
        loop_lines = set(script.loop_lines)

        for line_number in sorted(loop_lines.union(script.waits)):
            if line_number in loop_lines:
                record = by_line.get((script.file_path, line_number))
                if record is not None and record.execution_count > thresholds.loop_iteration_count:
                    issues.append(
                        Issue(
                            kind=IssueKind.INEFFICIENT_LOOP,
                            severity=Severity.MEDIUM,
                            script_file=script.file_path,
                            line_number=line_number,
                            description=(
                                f"Loop with high iteration count detected "
                                f"({record.execution_count} executions)"
                            ),
                            suggestion=(
                                "Consider using list operations, filtering, or limiting the "
                                "loop size. Review if all iterations are necessary."
                            ),
                            record=record,
                        )
                    )

            wait = script.waits.get(line_number)
            if wait is not None:
                ticks = wait_to_ticks(wait.amount, wait.unit)
                if ticks is not None and ticks > thresholds.long_wait_ticks:
                    issues.append(
                        Issue(
                            kind=IssueKind.LONG_WAIT,
                            severity=Severity.LOW,
                            script_file=script.file_path,
                            line_number=line_number,
                            description=f"Long wait statement: {wait} ({ticks} ticks)",
                            suggestion=(
                                "Consider if this wait is necessary. "
                                "Long waits can tie up script execution."
                            ),
                        )
                    )

        if script.variable_access_count > thresholds.excessive_variable_count:
            issues.append(
                Issue(
                    kind=IssueKind.EXCESSIVE_VARIABLES,
                    severity=Severity.MEDIUM,
                    script_file=script.file_path,
                    line_number=1,
                    description=(
                        f"Excessive variable access: {script.variable_access_count} occurrences"
                    ),
                    suggestion=(
                        "High variable usage can impact performance. Consider reducing "
                        "variable operations or using local variables."
                    ),
                )
            )

        return issues

    # ── Host load rule ────────────────────────────────────────────────

    def _check_load(
        self,
        metrics: Mapping[MetricKey, RecordSnapshot],
        current_load: float,
        thresholds: ThresholdConfig,
    ) -> list[Issue]:
        if current_load >= thresholds.low_load_threshold or not metrics:
            return []

        costliest = max(metrics.values(), key=lambda record: record.total_time_ns)

        return [
            Issue(
                kind=IssueKind.LOAD_IMPACT,
                severity=Severity.HIGH,
                script_file=costliest.source_file,
                line_number=costliest.line_number,
                description=(
                    f"Server load degraded to {current_load:.2f} "
                    f"(threshold {thresholds.low_load_threshold:.2f}); "
                    f"largest contributor spent {costliest.total_ms:.2f}ms"
                ),
                suggestion=(
                    "Spread this work over several ticks or move it off the main "
                    "thread while the server is under load."
                ),
                record=costliest,
            )
        ]
