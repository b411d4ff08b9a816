"""Scan command: structural facts for every script in a folder."""

import json
from pathlib import Path
from typing import Optional

import click
import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import SkriptProfilerError
from ..logging_config import setup_logging
from ..scanning import SourceAnalyzer, discover_scripts
from . import app
from ._common import console, fail, resolve_config


@app.command()
def scan(
    path: Path = typer.Argument(
        ...,
        help="Scripts folder to analyse",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    extension: Optional[str] = typer.Option(
        None,
        "--extension",
        "-e",
        help="Script file extension (default: .sk)",
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (table) or json",
        click_type=click.Choice(["rich", "json"], case_sensitive=False),
    ),
    labels: bool = typer.Option(
        False,
        "--labels",
        "-l",
        help="List the structural label of every matched line",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
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
    Analyse script sources without running them.

    Counts events, functions, commands, loops, waits and variable accesses
    per file.

    [bold cyan]Examples:[/bold cyan]

      skript-profiler scan plugins/Skript/scripts

      skript-profiler scan scripts/ --labels
    """
    setup_logging(verbose=verbose)

    try:
        settings = resolve_config(config, script_extension=extension)
    except SkriptProfilerError as e:
        fail(e)
        raise typer.Exit(1)

    analyzer = SourceAnalyzer()
    scripts = analyzer.analyze(discover_scripts(path, settings.script_extension))

    if fmt == "json":
        data = [
            {
                "file": info.file_path,
                "lines": info.line_count,
                "events": info.event_count,
                "functions": info.function_count,
                "commands": info.command_count,
                "loops": info.loop_count,
                "waits": len(info.waits),
                "variable_accesses": info.variable_access_count,
                "labels": {str(n): list(found) for n, found in info.labels.items()},
            }
            for info in scripts.values()
        ]
        typer.echo(json.dumps(data, indent=2))
        return

    if not scripts:
        console.print(f"[yellow]No {escape(settings.script_extension)} scripts found.[/yellow]")
        return

    table = Table(title=f"Scripts in {escape(str(path))}")
    table.add_column("File", style="bold")
    for column in ("Lines", "Events", "Functions", "Commands", "Loops", "Waits", "Variables"):
        table.add_column(column, justify="right")

    for info in scripts.values():
        table.add_row(
            escape(info.file_name),
            str(info.line_count),
            str(info.event_count),
            str(info.function_count),
            str(info.command_count),
            str(info.loop_count),
            str(len(info.waits)),
            str(info.variable_access_count),
        )
    console.print(table)

    if labels:
        for info in scripts.values():
            console.print(f"\n[bold]{escape(info.file_name)}[/bold]", highlight=False)
            for line_number in sorted(info.labels):
                label = escape(info.label_at(line_number) or "")
                console.print(f"  {line_number:>5}  {label}", highlight=False)

    for warning in analyzer.warnings:
        console.print(f"[yellow]{escape(warning)}[/yellow]")
