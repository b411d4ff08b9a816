"""Static analysis of script sources."""

from .analyzer import SourceAnalyzer
from .loader import discover_scripts, read_script
from .models import ScriptInfo, WaitStatement

__all__ = [
    "SourceAnalyzer",
    "ScriptInfo",
    "WaitStatement",
    "discover_scripts",
    "read_script",
]
