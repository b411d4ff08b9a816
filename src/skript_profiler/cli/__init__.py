"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="skript-profiler",
    help="Skript Profiler - execution profiling and bottleneck detection for Skript",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .scan import scan as _scan  # noqa: F401, E402
from .report import report as _report  # noqa: F401, E402


def main() -> None:
    app()
