"""Tests for the exception hierarchy."""

from skript_profiler.exceptions import (
    AnalysisError,
    ConfigurationError,
    InvalidConfigError,
    ScriptReadError,
    SkriptProfilerError,
    TraceFormatError,
)


class TestHierarchy:
    def test_everything_is_a_profiler_error(self):
        for cls in (AnalysisError, ScriptReadError, TraceFormatError, ConfigurationError):
            assert issubclass(cls, SkriptProfilerError)
        assert issubclass(InvalidConfigError, ConfigurationError)


class TestMessages:
    def test_plain_message(self):
        assert str(SkriptProfilerError("boom")) == "boom"

    def test_details_are_appended(self):
        error = ScriptReadError("/s/a.sk", "permission denied")
        assert str(error) == (
            "Cannot read script: /s/a.sk (filepath=/s/a.sk, reason=permission denied)"
        )
        assert error.reason == "permission denied"

    def test_trace_error_keeps_line(self):
        error = TraceFormatError(12, "invalid JSON")
        assert error.line_number == 12
        assert "line 12" in str(error)

    def test_invalid_config(self):
        error = InvalidConfigError("SKPROFILE_DEFAULT_LOAD", "abc", "not a number")
        assert error.key == "SKPROFILE_DEFAULT_LOAD"
        assert "abc" in str(error)

    def test_details_are_copied(self):
        details = {"line": "3"}
        error = SkriptProfilerError("bad trace", details)
        details["line"] = "4"
        assert str(error) == "bad trace (line=3)"
