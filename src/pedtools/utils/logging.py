"""Console logging and per-run log files.

Library code logs through loguru. The command-line tool additionally leaves
a short ``##``-prefixed record of each run (version, command, summary counts
and timings) in the output directory.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from loguru import logger

import pedtools

if TYPE_CHECKING:
    from pedtools.core.config import OutputConfig

LOG_FORMAT = "{time:HH:mm:ss} | <level>{level: <8}</level> | {message}"


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    sink: TextIO | None = None,
) -> None:
    """Replace any loguru handlers with the pedtools console setup.

    Called once on import with the defaults. The command-line tool calls it
    again to honour ``--verbose`` and to move console output off stdout.

    Args:
        verbose: Show DEBUG messages (per-pass sizes, file read counts) on
            the console instead of INFO and above only.
        log_file: Also record every message, DEBUG included, to this file
            as one JSON object per line.
        sink: Console stream, stdout when omitted.
    """
    logger.remove()

    logger.add(
        sink if sink is not None else sys.stdout,
        level="DEBUG" if verbose else "INFO",
        format=LOG_FORMAT,
        colorize=True,
    )

    if log_file:
        logger.add(log_file, serialize=True, level="DEBUG")


def _format_seconds(name: str, value: float | int) -> str:
    if isinstance(value, float):
        return f"## {name} time = {value:.2f} seconds"
    return f"## {name} time = {value} seconds"


def write_run_log(
    output_config: OutputConfig,
    params: dict,
    timing: dict,
    command_line: str,
) -> Path:
    """Record one command-line run in ``{outdir}/{prefix}.log.txt``.

    An existing log with the same prefix is overwritten.

    Args:
        output_config: Where the log goes.
        params: Input file, options and summary counts, written in order.
        timing: Named durations in seconds, normally including "total".
        command_line: How the tool was invoked.

    Returns:
        Path of the log file.

    Example output:
        ##
        ## pedtools Version = 0.1.0
        ## Date = 2026-01-31T10:30:00
        ##
        ## Command Line Input = pedtools inb -p ped.txt
        ##
        ## Summary Statistics:
        ## n_animals = 7
        ## n_inbred = 3
        ##
        ## Computation Time:
        ## total time = 0.01 seconds
        ##
    """
    lines = [
        "##",
        f"## pedtools Version = {pedtools.__version__}",
        f"## Date = {datetime.now().isoformat()}",
        "##",
        f"## Command Line Input = {command_line}",
        "##",
        "## Summary Statistics:",
        *(f"## {key} = {value}" for key, value in params.items()),
        "##",
        "## Computation Time:",
        *(_format_seconds(name, value) for name, value in timing.items()),
        "##",
    ]

    output_config.ensure_outdir()
    log_path = output_config.log_path
    log_path.write_text("\n".join(lines) + "\n")
    return log_path
