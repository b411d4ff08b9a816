"""Root of the Skript Profiler exception hierarchy.

Every error the profiler raises on purpose derives from
:class:`SkriptProfilerError`, so a front-end can catch one type, print it and
exit. Context such as a script path or a trace line number goes in
``details`` and is appended to the message when the error is printed.
"""

from typing import Dict, Optional


class SkriptProfilerError(Exception):
    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
