"""Profiling session lifecycle.

:class:`ProfilerSession` sequences start, track, stop, analyze and report,
delegating to the aggregator, source analyzer, detector and report
synthesizer. It is an ordinary object: construct one and hand it to whatever
front-end needs it.

Example:
    >>> session = ProfilerSession(source_provider=lambda: [("/s/a.sk", ["on join:"])])
    >>> session.start()
    True
    >>> with session.aggregator.span("/s/a.sk", 1, "event", "on join"):
    ...     pass
    >>> session.stop()
    True
    >>> "SKRIPT PROFILER REPORT" in session.report()
    True
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .config import ProfilerConfig
from .formatters.json_formatter import JsonFormatter
from .formatters.report import NO_DATA_MESSAGE, ReportSynthesizer
from .insights.detector import BottleneckDetector
from .insights.models import Issue
from .monitor import LoadMonitor, LoadSampler
from .scanning.analyzer import SourceAnalyzer
from .scanning.loader import discover_scripts
from .scanning.models import ScriptInfo
from .tracking.aggregator import ExecutionAggregator

logger = logging.getLogger(__name__)

SourceProvider = Callable[[], Iterable[tuple[str, Sequence[str]]]]


@dataclass(frozen=True)
class SessionStatus:
    active: bool
    current_load: float
    scripts_loaded: int
    records_tracked: int
    duration_ms: float


class ProfilerSession:
    """Owns one profiler's session state and its components.

    Lifecycle calls are serialized by one lock. Recording goes straight to
    :attr:`aggregator` and never takes that lock.
    """

    def __init__(
        self,
        config: Optional[ProfilerConfig] = None,
        source_provider: Optional[SourceProvider] = None,
        load_sampler: Optional[LoadSampler] = None,
        aggregator: Optional[ExecutionAggregator] = None,
    ) -> None:
        self.config = config or ProfilerConfig()
        self._source_provider = source_provider or self._discover
        self.aggregator = aggregator or ExecutionAggregator()
        self.analyzer = SourceAnalyzer()
        self.detector = BottleneckDetector()
        self.synthesizer = ReportSynthesizer(
            thresholds=self.config.thresholds,
            default_load=self.config.default_load,
        )
        self.monitor = LoadMonitor(
            sampler=load_sampler,
            interval_seconds=self.config.load_sample_interval_seconds,
            low_threshold=self.config.thresholds.low_load_threshold,
            default_load=self.config.default_load,
        )

        self.scripts: dict[str, ScriptInfo] = {}
        self.issues: list[Issue] = []

        self._lock = threading.RLock()
        self._active = False
        self._auto_stop: Optional[threading.Timer] = None
        self._generation = 0

    def _discover(self) -> Iterable[tuple[str, Sequence[str]]]:
        return discover_scripts(self.config.scripts_dir, self.config.script_extension)

    # ── Lifecycle ─────────────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def current_load(self) -> float:
        return self.monitor.current

    def start(self) -> bool:
        """Load scripts and begin tracking. Returns False if already running."""
        with self._lock:
            if self._active:
                return False

            logger.info("Starting profiling session...")
            self.reload_scripts()
            self.aggregator.reset()
            self.issues = []
            self.aggregator.start_session()

            if self.config.load_aware:
                self.monitor.start()

            self._generation += 1
            if self.config.max_duration_seconds > 0:
                self._auto_stop = threading.Timer(
                    self.config.max_duration_seconds,
                    self._stop_after_timeout,
                    args=(self._generation,),
                )
                self._auto_stop.daemon = True
                self._auto_stop.start()

            self._active = True
            logger.info("Profiling session started")
            return True

    def stop(self) -> bool:
        """Stop tracking. Returns False if no session is running."""
        with self._lock:
            if not self._active:
                return False

            logger.info("Stopping profiling session...")
            self.aggregator.stop_session()
            self.monitor.stop()
            if self._auto_stop is not None:
                self._auto_stop.cancel()
                self._auto_stop = None

            self._active = False
            logger.info("Profiling session stopped")
            return True

    def _stop_after_timeout(self, generation: int) -> None:
        """Timer callback; a timer left over from an earlier session does nothing."""
        with self._lock:
            if generation != self._generation or not self._active:
                return
            logger.info(
                "Profiling session reached its %ds limit", self.config.max_duration_seconds
            )
            self.stop()

    def reset(self) -> bool:
        """Discard records, issues and scripts. Refused while running."""
        with self._lock:
            if self._active:
                return False
            self.aggregator.reset()
            self.issues = []
            self.scripts = {}
            return True

    def reload_scripts(self) -> dict[str, ScriptInfo]:
        """Re-read every script; the new set replaces the old one."""
        with self._lock:
            self.scripts = self.analyzer.analyze(self._source_provider())
            logger.info("Loaded %d script file(s)", len(self.scripts))
            return self.scripts

    # ── Analysis and reporting ────────────────────────────────────────

    def _detect(self, metrics) -> list[Issue]:
        load = self.current_load if self.config.load_aware else None
        self.issues = self.detector.detect(
            metrics, self.scripts, self.config.thresholds, current_load=load
        )
        return self.issues

    def analyze(self) -> list[Issue]:
        """Run bottleneck detection over a fresh snapshot."""
        with self._lock:
            return list(self._detect(self.aggregator.snapshot()))

    def report(self, detailed: bool = False) -> str:
        """Analyse and render a report; a fixed sentence if nothing was recorded."""
        with self._lock:
            metrics = self.aggregator.snapshot()
            if not metrics:
                return NO_DATA_MESSAGE
            issues = self._detect(metrics)
            return self.synthesizer.render(
                metrics,
                issues,
                self.scripts,
                self.aggregator.session_duration_ms(),
                self.current_load,
                detailed=detailed,
            )

    def report_data(self) -> dict[str, Any]:
        """Structured counterpart of :meth:`report`."""
        with self._lock:
            metrics = self.aggregator.snapshot()
            issues = self._detect(metrics)
            return JsonFormatter().build(
                metrics,
                issues,
                self.scripts,
                self.aggregator.session_duration_ms(),
                self.current_load,
            )

    def status(self) -> SessionStatus:
        return SessionStatus(
            active=self._active,
            current_load=self.current_load,
            scripts_loaded=len(self.scripts),
            records_tracked=self.aggregator.record_count,
            duration_ms=self.aggregator.session_duration_ms(),
        )
