"""Output formatters for profiling results."""

from .json_formatter import JsonFormatter
from .report import NO_DATA_MESSAGE, ReportSynthesizer, short_file_name, strip_markup

__all__ = [
    "JsonFormatter",
    "ReportSynthesizer",
    "NO_DATA_MESSAGE",
    "short_file_name",
    "strip_markup",
]
