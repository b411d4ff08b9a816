"""Report command: replay a span trace and print the performance report."""

import json
from pathlib import Path
from typing import Optional

import click
import typer

from ..exceptions import SkriptProfilerError
from ..formatters.report import strip_markup
from ..logging_config import setup_logging
from ..session import ProfilerSession
from ..tracking.trace import load_trace, replay_trace
from . import app
from ._common import console, fail, resolve_config


@app.command()
def report(
    path: Path = typer.Argument(
        ...,
        help="Scripts folder the trace was recorded against",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    trace: Path = typer.Option(
        ...,
        "--trace",
        "-t",
        help="Span trace (JSON Lines) to replay",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    detailed: bool = typer.Option(
        False,
        "--detailed",
        "-d",
        help="Add a per-script breakdown",
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich, plain or json",
        click_type=click.Choice(["rich", "plain", "json"], case_sensitive=False),
    ),
    load: Optional[float] = typer.Option(
        None,
        "--load",
        help="Server TPS at the time of the recording",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Append a DEBUG-level log of the run to this file",
        dir_okay=False,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """
    Replay a recorded span trace against a scripts folder and report.

    Each trace line is a JSON object with [bold]file[/bold], [bold]line[/bold],
    [bold]kind[/bold], [bold]name[/bold] and [bold]duration_ms[/bold] (or
    [bold]duration_ns[/bold]).

    [bold cyan]Examples:[/bold cyan]

      skript-profiler report scripts/ --trace spans.jsonl

      skript-profiler report scripts/ -t spans.jsonl --detailed --load 17.2

      skript-profiler report scripts/ -t spans.jsonl --format json
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        settings = resolve_config(config, scripts_dir=str(path))
    except SkriptProfilerError as e:
        fail(e)
        raise typer.Exit(1)

    try:
        entries = load_trace(trace)
    except OSError as e:
        console.print(f"[red]Error:[/red] cannot read trace: {e}", highlight=False)
        raise typer.Exit(1)

    session = ProfilerSession(settings)
    session.start()
    if load is not None:
        session.monitor.update(load)
    replay_trace(entries, session.aggregator)
    session.stop()

    if fmt == "json":
        typer.echo(json.dumps(session.report_data(), indent=2))
        return

    text = session.report(detailed=detailed)
    if fmt == "plain":
        typer.echo(strip_markup(text))
    else:
        console.print(text, highlight=False)
