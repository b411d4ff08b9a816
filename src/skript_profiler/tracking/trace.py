"""Span traces: JSON Lines recordings replayed into an aggregator.

Each non-blank line is one object::

    {"file": "/srv/scripts/shop.sk", "line": 12, "kind": "event",
     "name": "on join", "duration_ms": 3.5}

``duration_ns`` may be given instead of ``duration_ms``. A line with neither
is an occurrence: counted, not timed. Lines starting with ``#`` are comments.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO

from ..exceptions import TraceFormatError
from .aggregator import ExecutionAggregator
from .records import NANOS_PER_MILLI, MetricKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceEntry:
    key: MetricKey
    element_name: str
    duration_ns: Optional[int]


def _finite_int(value) -> int:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"not a finite number: {value}")
    return int(value)


def parse_trace_line(text: str, line_number: int) -> TraceEntry:
    """Decode one trace line.

    Raises:
        TraceFormatError: If the line is not a valid span object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TraceFormatError(line_number, f"invalid JSON: {e.msg}")
    if not isinstance(data, dict):
        raise TraceFormatError(line_number, "expected a JSON object")

    try:
        source_file = str(data["file"])
        script_line = int(data["line"])
        kind = str(data.get("kind", "event"))
    except KeyError as e:
        raise TraceFormatError(line_number, f"missing field {e.args[0]!r}")
    except (TypeError, ValueError, OverflowError) as e:
        raise TraceFormatError(line_number, str(e))

    duration_ns: Optional[int] = None
    try:
        if "duration_ns" in data:
            duration_ns = _finite_int(data["duration_ns"])
        elif "duration_ms" in data:
            duration_ns = _finite_int(float(data["duration_ms"]) * NANOS_PER_MILLI)
    except (TypeError, ValueError, OverflowError) as e:
        raise TraceFormatError(line_number, f"bad duration: {e}")

    return TraceEntry(
        key=MetricKey(source_file, script_line, kind),
        element_name=str(data.get("name", "")),
        duration_ns=duration_ns,
    )


def read_trace(stream: TextIO) -> Iterator[TraceEntry]:
    """Yield entries from a trace stream, logging and skipping bad lines."""
    for line_number, raw in enumerate(stream, start=1):
        text = raw.strip()
        if not text or text.startswith("#"):
            continue
        try:
            yield parse_trace_line(text, line_number)
        except TraceFormatError as e:
            logger.warning("Skipping trace entry: %s", e)


def load_trace(path: Path) -> list[TraceEntry]:
    with open(path, encoding="utf-8") as f:
        return list(read_trace(f))


def replay_trace(entries: Iterable[TraceEntry], aggregator: ExecutionAggregator) -> int:
    """Feed entries into ``aggregator``; returns how many were replayed."""
    replayed = 0
    for entry in entries:
        if entry.duration_ns is None:
            aggregator.record_occurrence(entry.key, entry.element_name)
        else:
            aggregator.record_span(entry.key, entry.duration_ns, entry.element_name)
        replayed += 1
    return replayed
