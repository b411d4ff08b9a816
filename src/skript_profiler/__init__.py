"""
Skript Profiler - Execution Profiling and Bottleneck Detection for Skript

Records how long each script element takes to run, reads the script sources
to learn what every line is (event, loop, wait, function, command), and
correlates the two into ranked performance issues and a readable report.
"""

__version__ = "0.1.0"
__author__ = "MacMoment"

from .config import ProfilerConfig, ThresholdConfig, load_config
from .insights import BottleneckDetector, Issue, IssueKind, Severity
from .formatters import ReportSynthesizer
from .scanning import ScriptInfo, SourceAnalyzer
from .session import ProfilerSession
from .tracking import ExecutionAggregator, MetricKey, RecordSnapshot

__all__ = [
    "ProfilerSession",  # Main entry point
    "ExecutionAggregator",
    "MetricKey",
    "RecordSnapshot",
    "SourceAnalyzer",
    "ScriptInfo",
    "BottleneckDetector",
    "Issue",
    "IssueKind",
    "Severity",
    "ReportSynthesizer",
    "ProfilerConfig",
    "ThresholdConfig",
    "load_config",
]
