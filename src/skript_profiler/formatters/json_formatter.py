"""JSON formatter for structured consumers of a profiling session."""

import json
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from ..insights.models import Issue
from ..scanning.models import ScriptInfo
from ..tracking.records import MetricKey, RecordSnapshot


def _record_dict(record: RecordSnapshot) -> dict[str, Any]:
    return {
        "file": record.source_file,
        "line": record.line_number,
        "kind": record.element_kind,
        "name": record.element_name,
        "count": record.execution_count,
        "total_ms": round(record.total_ms, 3),
        "average_ms": round(record.average_ms, 3),
        "max_ms": round(record.max_ms, 3),
        "min_ms": round(record.min_ms, 3),
    }


def _issue_dict(issue: Issue) -> dict[str, Any]:
    return {
        "kind": issue.kind.value,
        "severity": issue.severity.label.lower(),
        "file": issue.script_file,
        "line": issue.line_number,
        "description": issue.description,
        "suggestion": issue.suggestion,
    }


def _script_dict(info: ScriptInfo) -> dict[str, Any]:
    return {
        "file": info.file_path,
        "lines": info.line_count,
        "events": info.event_count,
        "functions": info.function_count,
        "commands": info.command_count,
        "loops": info.loop_count,
        "variable_accesses": info.variable_access_count,
    }


class JsonFormatter:
    """Render a session's records, issues and scripts as JSON."""

    def build(
        self,
        metrics: Mapping[MetricKey, RecordSnapshot],
        issues: Sequence[Issue],
        scripts: Mapping[str, ScriptInfo],
        duration_ms: float,
        current_load: Optional[float],
    ) -> dict[str, Any]:
        return {
            "duration_ms": round(duration_ms, 3),
            "current_load": current_load,
            "records": [_record_dict(r) for r in metrics.values()],
            "issues": [_issue_dict(i) for i in issues],
            "scripts": [_script_dict(s) for s in scripts.values()],
        }

    def format(
        self,
        metrics: Mapping[MetricKey, RecordSnapshot],
        issues: Sequence[Issue],
        scripts: Mapping[str, ScriptInfo],
        duration_ms: float,
        current_load: Optional[float],
    ) -> str:
        data = self.build(metrics, issues, scripts, duration_ms, current_load)
        return json.dumps(data, indent=2)
