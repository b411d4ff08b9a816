"""End-to-end: script facts and runtime spans fused into ranked issues."""

import pytest

from skript_profiler.config import DEFAULT_THRESHOLDS
from skript_profiler.formatters.report import strip_markup
from skript_profiler.insights.models import IssueKind, Severity
from skript_profiler.session import ProfilerSession
from skript_profiler.tracking.records import MetricKey

FILE = "/srv/scripts/arena.sk"

ARENA = [
    "on join:",
    "    loop {arena::players::*} and {arena::spectators::*} and {_extra::*}:",
    "        wait 150 second",
]


@pytest.fixture
def finished_session():
    session = ProfilerSession(source_provider=lambda: [(FILE, ARENA)])
    session.start()

    loop_key = MetricKey(FILE, 2, "loop")
    for _ in range(1199):
        session.aggregator.record_span(loop_key, 9_800_000, "loop")
    session.aggregator.record_span(loop_key, 250_000_000, "loop")

    session.stop()
    return session


class TestScenario:
    def test_script_facts(self, finished_session):
        info = finished_session.scripts[FILE]
        assert info.event_count == 1
        assert info.loop_lines == (2,)
        assert info.variable_access_count == 3
        assert str(info.waits[3]) == "150 second"

    def test_record(self, finished_session):
        record = finished_session.aggregator.snapshot()[MetricKey(FILE, 2, "loop")]
        assert record.execution_count == 1200
        assert record.average_ms == pytest.approx(10.0, abs=0.01)
        assert record.max_ms == pytest.approx(250.0)
        assert record.min_ms == pytest.approx(9.8)

    def test_issues(self, finished_session):
        issues = finished_session.analyze()
        assert [(i.kind, i.severity, i.line_number) for i in issues] == [
            (IssueKind.SLOW_EVENT, Severity.CRITICAL, 2),
            (IssueKind.HIGH_FREQUENCY, Severity.HIGH, 2),
            (IssueKind.INEFFICIENT_LOOP, Severity.MEDIUM, 2),
            (IssueKind.LONG_WAIT, Severity.LOW, 3),
        ]
        assert issues[1].record.total_ms > DEFAULT_THRESHOLDS.high_frequency_total_ms
        assert "1200 executions" in issues[2].description
        assert "3000 ticks" in issues[3].description

    def test_report(self, finished_session):
        text = strip_markup(finished_session.report(detailed=True))
        assert "Total Executions: 1200" in text
        assert "1. arena.sk:2 - loop" in text
        assert text.index("[CRITICAL]") < text.index("[HIGH]") < text.index("[MEDIUM]")
        assert text.index("[MEDIUM]") < text.index("[LOW]")
        assert "Optimize slow event handlers" in text
        assert "Review loops for unnecessary iterations" in text
