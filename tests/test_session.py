"""Tests for session.py - the profiling lifecycle."""

import threading

import pytest

from skript_profiler.config import ProfilerConfig
from skript_profiler.formatters.report import NO_DATA_MESSAGE
from skript_profiler.insights.models import IssueKind
from skript_profiler.session import ProfilerSession
from skript_profiler.tracking.records import MetricKey

FILE = "/srv/scripts/shop.sk"


@pytest.fixture
def session(shop_lines):
    return ProfilerSession(source_provider=lambda: [(FILE, shop_lines)])


class TestLifecycle:
    def test_start_and_stop(self, session):
        assert session.start() is True
        assert session.start() is False
        assert session.is_active
        assert session.stop() is True
        assert session.stop() is False
        assert not session.is_active

    def test_start_loads_scripts(self, session):
        session.start()
        assert list(session.scripts) == [FILE]
        assert session.status().scripts_loaded == 1

    def test_start_discards_previous_records(self, session):
        session.start()
        session.aggregator.record_span(MetricKey(FILE, 5, "event"), 1_000_000)
        session.stop()
        session.start()
        assert session.aggregator.record_count == 0

    def test_reset_refused_while_running(self, session):
        session.start()
        assert session.reset() is False

    def test_reset_clears_state(self, session):
        session.start()
        session.aggregator.record_span(MetricKey(FILE, 5, "event"), 1_000_000)
        session.stop()

        assert session.reset() is True
        assert session.scripts == {}
        assert session.issues == []
        assert session.status().records_tracked == 0

    def test_discovers_scripts_from_config(self, tmp_path):
        (tmp_path / "join.sk").write_text("on join:\n", encoding="utf-8")
        session = ProfilerSession(ProfilerConfig(scripts_dir=str(tmp_path)))
        session.start()
        session.stop()
        assert [info.file_name for info in session.scripts.values()] == ["join.sk"]

    def test_load_sampler_runs_only_while_active(self):
        sampled = threading.Event()

        def sampler():
            sampled.set()
            return 19.0

        config = ProfilerConfig(load_sample_interval_seconds=0.01)
        session = ProfilerSession(config, source_provider=list, load_sampler=sampler)
        session.start()
        assert sampled.wait(timeout=2.0)
        assert session.monitor.running
        session.stop()
        assert not session.monitor.running

    def test_load_unaware_session_never_samples(self):
        config = ProfilerConfig(load_aware=False)
        session = ProfilerSession(config, source_provider=list, load_sampler=lambda: 19.0)
        session.start()
        assert not session.monitor.running
        session.stop()

    def test_stop_after_timeout(self, session):
        session.start()
        session._stop_after_timeout(session._generation)
        assert not session.is_active

    def test_stale_timer_leaves_new_session_running(self, shop_lines):
        """A timer from a stopped session must not stop the one started after it."""
        config = ProfilerConfig(max_duration_seconds=3600)
        session = ProfilerSession(config, source_provider=lambda: [(FILE, shop_lines)])
        session.start()
        first = session._generation
        session.stop()
        session.start()

        session._stop_after_timeout(first)
        assert session.is_active

        session._stop_after_timeout(session._generation)
        assert not session.is_active

    @pytest.mark.slow
    def test_timer_firing_during_restart(self, shop_lines):
        config = ProfilerConfig(max_duration_seconds=1)
        session = ProfilerSession(config, source_provider=lambda: [(FILE, shop_lines)])
        session.start()
        old_timer = session._auto_stop

        with session._lock:
            old_timer.join(timeout=1.5)
            session.stop()
            session.start()
        old_timer.join(timeout=1.0)

        assert session.is_active
        session.stop()

    @pytest.mark.slow
    def test_max_duration_stops_session(self, shop_lines):
        config = ProfilerConfig(max_duration_seconds=1)
        session = ProfilerSession(config, source_provider=lambda: [(FILE, shop_lines)])
        session.start()
        session._auto_stop.join(timeout=5.0)
        assert not session.is_active


class TestReporting:
    def test_report_without_data(self, session):
        assert session.report() == NO_DATA_MESSAGE
        session.start()
        assert session.report() == NO_DATA_MESSAGE

    def test_report_while_running(self, session):
        session.start()
        with session.aggregator.span(FILE, 5, "event", "on join"):
            pass
        report = session.report()
        assert "SKRIPT PROFILER REPORT" in report
        assert session.is_active

    def test_analyze_includes_static_findings(self, session):
        session.start()
        session.aggregator.record_span(MetricKey(FILE, 5, "event"), 300_000_000)
        session.stop()
        kinds = [issue.kind for issue in session.analyze()]
        assert kinds == [IssueKind.SLOW_EVENT]

    def test_low_load_adds_load_impact(self, session):
        session.start()
        session.aggregator.record_span(MetricKey(FILE, 5, "event"), 1_000_000)
        session.monitor.update(12.0)
        session.stop()
        assert IssueKind.LOAD_IMPACT in [issue.kind for issue in session.analyze()]

    def test_load_ignored_when_not_load_aware(self, shop_lines):
        config = ProfilerConfig(load_aware=False)
        session = ProfilerSession(config, source_provider=lambda: [(FILE, shop_lines)])
        session.start()
        session.aggregator.record_span(MetricKey(FILE, 5, "event"), 1_000_000)
        session.monitor.update(12.0)
        assert session.analyze() == []

    def test_report_data(self, session):
        session.start()
        session.aggregator.record_span(MetricKey(FILE, 5, "event"), 2_000_000, "on join")
        session.stop()
        data = session.report_data()
        assert data["records"][0]["name"] == "on join"
        assert data["scripts"][0]["file"] == FILE
        assert data["current_load"] == 20.0

    def test_status(self, session):
        session.start()
        session.aggregator.record_occurrence(MetricKey(FILE, 5, "event"))
        status = session.status()
        assert status.active is True
        assert status.current_load == 20.0
        assert status.records_tracked == 1
        assert status.duration_ms >= 0.0
