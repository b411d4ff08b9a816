"""Analysis-related exceptions: script files, traces."""

from pathlib import Path
from typing import Union

from .base import SkriptProfilerError


class AnalysisError(SkriptProfilerError):
    """Base class for analysis-related errors."""
    pass


class ScriptReadError(AnalysisError):
    """Raised when a script file cannot be read or its payload is malformed."""

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot read script: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class TraceFormatError(AnalysisError):
    """Raised when a line of a span trace cannot be decoded."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(
            f"Malformed trace entry on line {line_number}",
            details={"line": str(line_number), "reason": reason},
        )
        self.line_number = line_number
        self.reason = reason
