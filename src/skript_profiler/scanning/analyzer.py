"""Line-oriented structural analysis of Skript source.

Each line runs through every detector; detectors do not exclude one
another, so ``loop {_players::*}:`` is both a loop and two variable
accesses. Matching is case-insensitive.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import PurePath

from ..exceptions import ScriptReadError
from .models import ScriptInfo, WaitStatement

logger = logging.getLogger(__name__)

EVENT_PATTERN = re.compile(r"^\s*on\s+(.+):", re.IGNORECASE)
FUNCTION_PATTERN = re.compile(r"^\s*function\s+(\w+)\s*\(", re.IGNORECASE)
COMMAND_PATTERN = re.compile(r"^\s*command\s+/?([\w-]+)", re.IGNORECASE)
LOOP_PATTERN = re.compile(r"\bloop\s+", re.IGNORECASE)
WAIT_PATTERN = re.compile(r"\bwait\s+(\d+)\s*(ticks?|seconds?|minutes?)\b", re.IGNORECASE)
VARIABLE_PATTERN = re.compile(r"\{[^}]+\}")


class SourceAnalyzer:
    """Turns (path, lines) pairs into ScriptInfo.

    Warnings for skipped files are kept on :attr:`warnings` until the next
    :meth:`analyze` call.
    """

    def __init__(self) -> None:
        self.warnings: list[str] = []

    def analyze(self, files: Iterable[tuple[str, Sequence[str]]]) -> dict[str, ScriptInfo]:
        """Analyse a batch of scripts.

        The result replaces any earlier one; it is never merged.
        """
        self.warnings = []
        scripts: dict[str, ScriptInfo] = {}

        for item in files:
            try:
                path, lines = item
                info = self.analyze_file(path, lines)
            except (ScriptReadError, TypeError, ValueError) as e:
                message = f"Skipped script: {e}"
                logger.warning(message)
                self.warnings.append(message)
                continue
            scripts[info.file_path] = info

        logger.info("Analysed %d script file(s)", len(scripts))
        return scripts

    def analyze_file(self, path: str, lines: Sequence[str]) -> ScriptInfo:
        """Analyse a single script.

        Raises:
            ScriptReadError: If the path or lines are not text
        """
        if isinstance(path, PurePath):
            path = str(path)
        if not isinstance(path, str) or not path:
            raise ScriptReadError(repr(path), "path must be a non-empty string")
        if isinstance(lines, (str, bytes)) or not isinstance(lines, Sequence):
            raise ScriptReadError(path, "lines must be a sequence of strings")
        for line in lines:
            if not isinstance(line, str):
                raise ScriptReadError(path, f"non-text line of type {type(line).__name__}")

        labels: dict[int, list[str]] = {}
        loop_lines: list[int] = []
        waits: dict[int, WaitStatement] = {}
        events = functions = commands = variables = 0

        for line_number, line in enumerate(lines, start=1):
            found: list[str] = []

            match = EVENT_PATTERN.search(line)
            if match:
                found.append(f"Event: {match.group(1).strip()}")
                events += 1

            match = FUNCTION_PATTERN.search(line)
            if match:
                found.append(f"Function: {match.group(1)}")
                functions += 1

            match = COMMAND_PATTERN.search(line)
            if match:
                found.append(f"Command: {match.group(1)}")
                commands += 1

            if LOOP_PATTERN.search(line):
                found.append("Loop")
                loop_lines.append(line_number)

            match = WAIT_PATTERN.search(line)
            if match:
                wait = WaitStatement(amount=int(match.group(1)), unit=match.group(2))
                found.append(f"Wait: {wait}")
                waits[line_number] = wait

            variables += len(VARIABLE_PATTERN.findall(line))

            if found:
                labels[line_number] = found

        return ScriptInfo(
            file_path=path,
            file_name=PurePath(path).name,
            lines=tuple(lines),
            labels={n: tuple(found) for n, found in labels.items()},
            loop_lines=tuple(loop_lines),
            waits=waits,
            event_count=events,
            function_count=functions,
            command_count=commands,
            loop_count=len(loop_lines),
            variable_access_count=variables,
        )
