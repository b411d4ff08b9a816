"""Text report rendering.

Reports are Rich console markup: print them through a ``rich.console.Console``
to get colour, or pass them through :func:`strip_markup` for plain text. Every
piece of script-derived text is escaped, so a Skript pattern such as
``[the] player`` never gets mistaken for a style tag.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import PurePath
from typing import Optional

from rich.markup import escape
from rich.text import Text

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..insights.models import Issue, IssueKind, Severity
from ..monitor import is_usable_load
from ..scanning.models import ScriptInfo
from ..tracking.records import MetricKey, RecordSnapshot

NO_DATA_MESSAGE = "No profiling data available. Start profiling first!"

DEFAULT_LOAD = 20.0
DETAILED_LINES_PER_SCRIPT = 5

_RULE = "═" * 60

_SEVERITY_STYLES = {
    Severity.CRITICAL: "bold dark_red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "white",
}

# Tips shown only when an issue of that kind was found.
_KIND_TIPS = [
    (IssueKind.SLOW_EVENT, "Optimize slow event handlers to improve server responsiveness"),
    (IssueKind.INEFFICIENT_LOOP, "Review loops for unnecessary iterations or complex operations"),
    (
        IssueKind.EXCESSIVE_VARIABLES,
        "Consider reducing variable operations or using more efficient data structures",
    ),
    (IssueKind.LONG_WAIT, "Shorten or remove long waits that hold scripts open"),
    (IssueKind.HIGH_FREQUENCY, "Debounce or batch code paths that run thousands of times"),
    (IssueKind.LOAD_IMPACT, "Profile again at low load to separate script cost from server lag"),
]

_GENERAL_TIPS = [
    "Use a detailed report for line-by-line analysis",
    "Consider async operations for I/O-heavy tasks",
    "Cache frequently accessed data when possible",
]


def strip_markup(report: str) -> str:
    """Plain-text version of a rendered report."""
    return Text.from_markup(report).plain


def short_file_name(path: Optional[str]) -> str:
    if not path:
        return "unknown"
    return PurePath(path.replace("\\", "/")).name


def _speed_style(average_ms: float) -> str:
    if average_ms > 100:
        return "red"
    if average_ms > 50:
        return "yellow"
    return "green"


def _slowest(records: Sequence[RecordSnapshot], limit: int) -> list[RecordSnapshot]:
    # sorted() is stable, so equal averages keep snapshot order
    return sorted(records, key=lambda r: r.average_ms, reverse=True)[:limit]


class ReportSynthesizer:
    """Renders records, issues and script facts into a markup report."""

    def __init__(
        self,
        thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
        default_load: float = DEFAULT_LOAD,
    ) -> None:
        self.thresholds = thresholds
        self.default_load = default_load

    def resolve_load(self, current_load: Optional[float]) -> float:
        """Fall back to the default when no usable load sample exists."""
        if not is_usable_load(current_load):
            return self.default_load
        return current_load

    def render(
        self,
        metrics: Mapping[MetricKey, RecordSnapshot],
        issues: Sequence[Issue],
        scripts: Mapping[str, ScriptInfo],
        duration_ms: float,
        current_load: Optional[float],
        detailed: bool = False,
    ) -> str:
        if not metrics:
            return NO_DATA_MESSAGE

        records = list(metrics.values())
        out: list[str] = []

        out.extend(self._header("SKRIPT PROFILER REPORT"))
        out.append("")
        out.extend(self._summary(records, scripts, duration_ms, self.resolve_load(current_load)))
        out.append("")
        out.extend(self._slowest_section(records))
        out.append("")
        out.extend(self._issues_section(issues))
        out.append("")
        if detailed:
            out.extend(self._detailed_section(records, scripts))
            out.append("")
        out.extend(self._recommendations(issues))

        return "\n".join(out)

    # ── Sections ──────────────────────────────────────────────────────

    def _header(self, title: str) -> list[str]:
        return [
            f"[gold1]{_RULE}[/gold1]",
            f"[bold yellow]  {title}[/bold yellow]",
            f"[gold1]{_RULE}[/gold1]",
        ]

    def _summary(
        self,
        records: list[RecordSnapshot],
        scripts: Mapping[str, ScriptInfo],
        duration_ms: float,
        load: float,
    ) -> list[str]:
        total_executions = sum(r.execution_count for r in records)
        total_ms = sum(r.total_ms for r in records)
        return [
            "[bold cyan]Summary:[/bold cyan]",
            f"  Duration: {duration_ms / 1000.0:.2f} seconds",
            f"  Current TPS: {load:.2f}",
            f"  Scripts Analyzed: {len(scripts)}",
            f"  Total Events/Functions Tracked: {len(records)}",
            f"  Total Executions: {total_executions}",
            f"  Total Execution Time: {total_ms:.2f}ms",
        ]

    def _slowest_section(self, records: list[RecordSnapshot]) -> list[str]:
        lines = ["[bold cyan]Top Slowest Operations:[/bold cyan]"]
        for rank, record in enumerate(_slowest(records, self.thresholds.top_slowest_count), 1):
            style = _speed_style(record.average_ms)
            location = f"{short_file_name(record.source_file)}:{record.line_number}"
            lines.append(
                f"  [{style}]{rank}. {escape(location)} - {escape(record.element_name)}[/{style}]"
            )
            lines.append(
                f"     Avg: {record.average_ms:.2f}ms | Max: {record.max_ms:.2f}ms"
                f" | Count: {record.execution_count}"
            )
        return lines

    def _issues_section(self, issues: Sequence[Issue]) -> list[str]:
        if not issues:
            return ["[bold cyan]Performance Issues:[/bold cyan]", "  No performance issues detected."]

        limit = self.thresholds.max_reported_issues
        lines = ["[bold cyan]Performance Issues Detected:[/bold cyan]"]
        for issue in issues[:limit]:
            style = _SEVERITY_STYLES[issue.severity]
            location = f"{short_file_name(issue.script_file)}:{issue.line_number}"
            lines.append("")
            lines.append(
                f"  [{style}]\\[{issue.severity.label}] {issue.kind.display_name}[/{style}]"
            )
            lines.append(f"  Location: {escape(location)}")
            lines.append(f"  Issue: {escape(issue.description)}")
            if self.thresholds.include_suggestions:
                lines.append(f"  [green]Suggestion: {escape(issue.suggestion)}[/green]")

        if len(issues) > limit:
            lines.append("")
            lines.append(f"  ... and {len(issues) - limit} more issue(s)")
        return lines

    def _detailed_section(
        self, records: list[RecordSnapshot], scripts: Mapping[str, ScriptInfo]
    ) -> list[str]:
        by_file: dict[str, list[RecordSnapshot]] = {}
        for record in records:
            by_file.setdefault(record.source_file, []).append(record)

        lines = ["[bold cyan]Detailed Breakdown by Script:[/bold cyan]"]
        for script_file, file_records in by_file.items():
            lines.append("")
            lines.append(f"  [yellow]{escape(short_file_name(script_file))}:[/yellow]")
            info = scripts.get(script_file)
            if info is not None:
                lines.append(
                    f"    Events: {info.event_count} | Functions: {info.function_count}"
                    f" | Commands: {info.command_count}"
                )
                lines.append(
                    f"    Loops: {info.loop_count} | Variable accesses: {info.variable_access_count}"
                )
            for record in _slowest(file_records, DETAILED_LINES_PER_SCRIPT):
                lines.append(
                    f"    Line {record.line_number}: {record.average_ms:.2f}ms avg"
                    f" ({record.execution_count} executions)"
                )
        return lines

    def _recommendations(self, issues: Sequence[Issue]) -> list[str]:
        found = {issue.kind for issue in issues}
        lines = ["[bold cyan]General Recommendations:[/bold cyan]"]
        lines.extend(f"  • {tip}" for kind, tip in _KIND_TIPS if kind in found)
        lines.extend(f"  • {tip}" for tip in _GENERAL_TIPS)
        return lines
