"""Runtime measurement: metric records, the aggregator, trace replay."""

from .aggregator import ExecutionAggregator, SpanHandle
from .records import MetricKey, MetricRecord, RecordSnapshot
from .trace import TraceEntry, load_trace, read_trace, replay_trace

__all__ = [
    "ExecutionAggregator",
    "SpanHandle",
    "MetricKey",
    "MetricRecord",
    "RecordSnapshot",
    "TraceEntry",
    "load_trace",
    "read_trace",
    "replay_trace",
]
