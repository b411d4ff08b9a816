"""Sub-command handling for interactive front-ends.

:class:`ProfilerCommands` maps ``start | stop | report [detailed] | reset |
status | help`` onto a :class:`~skript_profiler.session.ProfilerSession` and
answers with lines of Rich markup. A chat bridge, a console or a REPL only
needs to split the user's input into arguments and print what comes back.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .formatters.report import strip_markup
from .session import ProfilerSession

logger = logging.getLogger(__name__)

SUBCOMMANDS = ("start", "stop", "report", "reset", "status", "help")
REPORT_OPTIONS = ("detailed",)


class ProfilerCommands:
    def __init__(self, session: ProfilerSession, command_name: str = "skprofile") -> None:
        self.session = session
        self.command_name = command_name

    def handle(self, args: Sequence[str]) -> list[str]:
        """Run one sub-command and return the reply lines."""
        if not args:
            return self.help()

        subcommand = args[0].lower()
        if subcommand == "start":
            return self.start()
        if subcommand == "stop":
            return self.stop()
        if subcommand == "report":
            detailed = len(args) > 1 and args[1].lower() == "detailed"
            return self.report(detailed)
        if subcommand == "reset":
            return self.reset()
        if subcommand == "status":
            return self.status()
        if subcommand == "help":
            return self.help()
        return [f"[red]Unknown subcommand. Use '/{self.command_name} help' for help.[/red]"]

    def complete(self, args: Sequence[str]) -> list[str]:
        """Tab-completion candidates for a partial argument list."""
        if len(args) == 1:
            prefix = args[0].lower()
            return [cmd for cmd in SUBCOMMANDS if cmd.startswith(prefix)]
        if len(args) == 2 and args[0].lower() == "report":
            prefix = args[1].lower()
            return [opt for opt in REPORT_OPTIONS if opt.startswith(prefix)]
        return []

    # ── Sub-commands ──────────────────────────────────────────────────

    def start(self) -> list[str]:
        if self.session.is_active:
            return ["[yellow]Profiler is already running![/yellow]"]
        if not self.session.start():
            return ["[red]Failed to start profiling.[/red]"]
        return [
            f"[green]Profiling started! Use '/{self.command_name} report' to view results.[/green]",
            "[grey50]The profiler is now tracking script execution...[/grey50]",
        ]

    def stop(self) -> list[str]:
        if not self.session.is_active:
            return ["[yellow]Profiler is not running![/yellow]"]
        if not self.session.stop():
            return ["[red]Failed to stop profiling.[/red]"]
        return [
            f"[green]Profiling stopped! Use '/{self.command_name} report' to view results.[/green]"
        ]

    def report(self, detailed: bool = False) -> list[str]:
        lines = ["[grey50]Generating performance report...[/grey50]"]
        report_lines = self.session.report(detailed=detailed).split("\n")
        destination = self.session.config.report_format

        if destination in ("console", "both"):
            logger.info("=== Performance Report ===")
            for line in report_lines:
                logger.info(strip_markup(line))

        if destination == "console":
            lines.append("[green]Report generated and logged to console![/green]")
        else:
            lines.extend(report_lines)
        return lines

    def reset(self) -> list[str]:
        if not self.session.reset():
            return ["[yellow]Stop profiling before resetting![/yellow]"]
        return ["[green]Profiling data reset![/green]"]

    def status(self) -> list[str]:
        status = self.session.status()
        state = "[green]RUNNING[/green]" if status.active else "[red]STOPPED[/red]"
        hint = "stop" if status.active else "start"
        hint_text = "to stop profiling" if status.active else "to begin profiling"
        return [
            "[gold1]=== Profiler Status ===[/gold1]",
            f"[cyan]Status:[/cyan] {state}",
            f"[cyan]Current TPS:[/cyan] {status.current_load:.2f}",
            f"[cyan]Scripts Loaded:[/cyan] {status.scripts_loaded}",
            f"[cyan]Elements Tracked:[/cyan] {status.records_tracked}",
            f"[grey50]Use '/{self.command_name} {hint}' {hint_text}[/grey50]",
        ]

    def help(self) -> list[str]:
        name = self.command_name
        entries = [
            ("start", "Start profiling"),
            ("stop", "Stop profiling"),
            ("report \\[detailed]", "Generate report"),
            ("reset", "Reset profiling data"),
            ("status", "Show profiler status"),
            ("help", "Show this help"),
        ]
        lines = ["[gold1]=== Skript Profiler Commands ===[/gold1]"]
        lines.extend(
            f"[yellow]/{name} {usage}[/yellow][grey50] - {text}[/grey50]" for usage, text in entries
        )
        return lines
