"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import ProfilerConfig, load_config
from ..exceptions import SkriptProfilerError

console = Console()


def resolve_config(config: Optional[Path] = None, **overrides) -> ProfilerConfig:
    """Build configuration from CLI options, dropping unset ones."""
    return load_config(
        config_file=config,
        **{key: value for key, value in overrides.items() if value is not None},
    )


def fail(error: SkriptProfilerError) -> None:
    console.print(f"[red]Error:[/red] {error}", markup=True, highlight=False)
