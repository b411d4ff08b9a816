"""Configuration loading and management for Skript Profiler.

Configuration sources are merged in priority order:
    1. Defaults (defined in ProfilerConfig)
    2. Global config (~/.skript-profiler.toml)
    3. Project config (./skript-profiler.toml)
    4. Explicit config file
    5. Environment variables (SKPROFILE_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(default_load=19.5)
    >>> config.default_load
    19.5
    >>> config.thresholds.slow_execution_ms
    50.0
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

ReportFormat = Literal["sender", "console", "both"]

_REPORT_FORMATS = ("sender", "console", "both")


@dataclass(frozen=True)
class ThresholdConfig:
    """Detection thresholds and report limits.

    The detector and report synthesizer never hard-code a limit; everything
    they compare against lives here.

    Attributes:
        Execution time:
            slow_execution_ms: Average duration that marks an element slow
            very_slow_execution_ms: Maximum duration that marks it critical

        Frequency:
            high_frequency_count: Executions above this are "high frequency"
            high_frequency_total_ms: Total time that escalates frequency to HIGH

        Script content:
            loop_iteration_count: Executions of a loop line that count as excessive
            long_wait_ticks: Wait length (in ticks, 20 per second) considered long
            excessive_variable_count: Variable accesses per file considered excessive

        Host load:
            low_load_threshold: Load (TPS) below which the host is considered strained

        Reporting:
            max_reported_issues: Issues listed before truncating
            top_slowest_count: Entries in the "slowest operations" section
            include_suggestions: Print a remediation hint under each issue
    """

    # === Execution time ===
    slow_execution_ms: float = 50.0
    very_slow_execution_ms: float = 200.0

    # === Frequency ===
    high_frequency_count: int = 1000
    high_frequency_total_ms: float = 1000.0

    # === Script content ===
    loop_iteration_count: int = 1000
    long_wait_ticks: int = 100
    excessive_variable_count: int = 500

    # === Host load ===
    low_load_threshold: float = 18.0

    # === Reporting ===
    max_reported_issues: int = 10
    top_slowest_count: int = 10
    include_suggestions: bool = True

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if self.slow_execution_ms <= 0:
            raise ValueError("slow_execution_ms must be positive")
        if self.very_slow_execution_ms < self.slow_execution_ms:
            raise ValueError("very_slow_execution_ms must not be below slow_execution_ms")

        non_negative = [
            "high_frequency_count",
            "high_frequency_total_ms",
            "loop_iteration_count",
            "long_wait_ticks",
            "excessive_variable_count",
            "low_load_threshold",
        ]
        for field_name in non_negative:
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non-negative")

        if self.max_reported_issues < 1:
            raise ValueError("max_reported_issues must be at least 1")
        if self.top_slowest_count < 1:
            raise ValueError("top_slowest_count must be at least 1")


# Default threshold configuration (singleton)
DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class ProfilerConfig:
    """Configuration for a profiling session.

    Attributes:
        Script discovery:
            scripts_dir: Directory holding the scripts to analyse
            script_extension: Extension a file needs to be analysed

        Host load:
            load_aware: Sample host load while a session runs
            load_sample_interval_seconds: Seconds between load samples
            default_load: Load reported when no sample is available

        Session:
            max_duration_seconds: Auto-stop after this many seconds (0 = never)

        Output:
            report_format: Where reports go: sender, console or both
    """

    # Script discovery
    scripts_dir: str = "plugins/Skript/scripts"
    script_extension: str = ".sk"

    # Host load
    load_aware: bool = True
    load_sample_interval_seconds: float = 1.0
    default_load: float = 20.0

    # Session
    max_duration_seconds: int = 0

    # Output
    report_format: ReportFormat = "both"

    # Detection thresholds (nested config)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.script_extension.startswith("."):
            raise ValueError("script_extension must start with '.'")
        if self.load_sample_interval_seconds <= 0:
            raise ValueError("load_sample_interval_seconds must be positive")
        if self.default_load < 0:
            raise ValueError("default_load must be non-negative")
        if self.max_duration_seconds < 0:
            raise ValueError("max_duration_seconds must be non-negative")
        if self.report_format not in _REPORT_FORMATS:
            raise ValueError(f"report_format must be one of {', '.join(_REPORT_FORMATS)}")


def load_config(config_file: Optional[Path] = None, **overrides) -> ProfilerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). A
            ``thresholds`` override may be a dict or a ThresholdConfig.

    Returns:
        Validated ProfilerConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid
        InvalidConfigError: If an environment variable cannot be parsed
    """
    merged: dict = {}

    # 1. Global config
    global_config = Path.home() / ".skript-profiler.toml"
    if global_config.exists():
        merged.update(_load_toml_checked(global_config, "global config"))

    # 2. Project config
    project_config = Path.cwd() / "skript-profiler.toml"
    if project_config.exists():
        merged.update(_load_toml_checked(project_config, "project config"))

    # 3. Explicit config file (highest priority from files)
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_checked(config_file, "config file"))

    # 4. Environment variables (threshold vars extend the [thresholds] table)
    env_overrides = _load_env_vars()
    env_thresholds = env_overrides.pop("thresholds", None)
    if env_thresholds:
        merged["thresholds"] = {**merged.get("thresholds", {}), **env_thresholds}
    merged.update(env_overrides)

    # 5. Keyword overrides
    merged.update(overrides)

    # [thresholds] table
    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = ThresholdConfig(**thresholds)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid [thresholds] config: {e}")
    elif isinstance(thresholds, ThresholdConfig):
        merged["thresholds"] = thresholds

    try:
        return ProfilerConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_toml_checked(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from SKPROFILE_* environment variables.

    Every scalar ProfilerConfig field is reachable, e.g.
    ``SKPROFILE_DEFAULT_LOAD=19.5`` or ``SKPROFILE_LOAD_AWARE=false``.
    Threshold fields use the ``SKPROFILE_THRESHOLDS_`` prefix, e.g.
    ``SKPROFILE_THRESHOLDS_SLOW_EXECUTION_MS=75``.
    """
    result: dict[str, Any] = _parse_env_fields(ProfilerConfig, "SKPROFILE_")
    thresholds = _parse_env_fields(ThresholdConfig, "SKPROFILE_THRESHOLDS_")
    if thresholds:
        result["thresholds"] = thresholds
    return result


def _parse_env_fields(cls: type, prefix: str) -> dict[str, Any]:
    type_hints = get_type_hints(cls)
    result: dict[str, Any] = {}

    for field_name in cls.__dataclass_fields__:
        env_key = f"{prefix}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed as a single variable.

    Raises:
        ValueError: If the value can't be parsed to the expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Bool: accept true/false/1/0/yes/no
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like ReportFormat)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
