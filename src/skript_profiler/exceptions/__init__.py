"""Exception hierarchy for Skript Profiler."""

from .analysis import AnalysisError, ScriptReadError, TraceFormatError
from .base import SkriptProfilerError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "SkriptProfilerError",
    "AnalysisError",
    "ScriptReadError",
    "TraceFormatError",
    "ConfigurationError",
    "InvalidConfigError",
]
