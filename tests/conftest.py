"""Shared test fixtures for Skript Profiler tests."""

import pytest

from skript_profiler.config import DEFAULT_THRESHOLDS
from skript_profiler.scanning.analyzer import SourceAnalyzer
from skript_profiler.tracking.records import NANOS_PER_MILLI, MetricKey, RecordSnapshot


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class FakeClock:
    """Manually advanced clock; call it to read the time."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, amount):
        self.now += amount


@pytest.fixture
def fake_clock():
    """Monotonic-seconds clock starting at 100.0."""
    return FakeClock(100.0)


@pytest.fixture
def thresholds():
    """Default detection thresholds."""
    return DEFAULT_THRESHOLDS


@pytest.fixture
def make_snapshot():
    """Build a RecordSnapshot from millisecond figures."""

    def _make(
        source_file="/srv/scripts/shop.sk",
        line_number=1,
        element_kind="event",
        count=1,
        total_ms=1.0,
        max_ms=None,
        min_ms=None,
        name="",
    ):
        if max_ms is None:
            max_ms = total_ms / count if count else 0.0
        return RecordSnapshot(
            key=MetricKey(source_file, line_number, element_kind),
            element_name=name or element_kind,
            execution_count=count,
            total_time_ns=int(total_ms * NANOS_PER_MILLI),
            max_time_ns=int(max_ms * NANOS_PER_MILLI),
            min_time_ns=None if min_ms is None else int(min_ms * NANOS_PER_MILLI),
        )

    return _make


@pytest.fixture
def make_script():
    """Analyse an in-memory script."""

    def _make(lines, path="/srv/scripts/shop.sk"):
        return SourceAnalyzer().analyze_file(path, lines)

    return _make


@pytest.fixture
def shop_lines():
    """A small but representative script."""
    return [
        "command /shop:",
        "    trigger:",
        "        open chest inventory with 3 rows named \"Shop\" to player",
        "",
        "on join:",
        "    set {joins::%player%} to {joins::%player%} + 1",
        "    loop all players:",
        "        send \"%player% joined\" to loop-player",
        "    wait 3 seconds",
        "",
        "function reward(p: player):",
        "    give diamond to {_p}",
    ]
