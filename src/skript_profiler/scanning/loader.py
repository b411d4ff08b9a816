"""Script discovery on disk.

Produces the ``(absolute_path, lines)`` pairs that
:class:`~skript_profiler.scanning.analyzer.SourceAnalyzer` consumes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Union

from ..exceptions import ScriptReadError

logger = logging.getLogger(__name__)


def read_script(path: Path) -> list[str]:
    """Read a script as lines without line terminators.

    Raises:
        ScriptReadError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ScriptReadError(path, e.strerror or str(e))
    return text.splitlines()


def discover_scripts(
    root: Union[str, Path], extension: str = ".sk"
) -> Iterator[tuple[str, list[str]]]:
    """Walk ``root`` and yield every script with the given extension.

    Files are yielded in sorted path order. Unreadable files are logged and
    skipped; a missing root yields nothing.
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        logger.warning("Scripts folder not found: %s", root_path)
        return

    logger.info("Loading scripts from: %s", root_path)
    suffix = extension.lower()
    for path in sorted(root_path.rglob("*")):
        if not path.is_file() or path.suffix.lower() != suffix:
            continue
        try:
            yield str(path), read_script(path)
        except ScriptReadError as e:
            logger.warning("Failed to load script: %s", e)
