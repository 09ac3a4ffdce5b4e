# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Command-line interface for chat-archive-to-json."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .archive import archive_to_json, parse_archive
from .config import DEFAULT_ENCODING, DEFAULT_PARSER, SUPPORTED_PARSERS
from .errors import ArchiveError
from .extractor import MessageExtractor

LOGGER = logging.getLogger(__name__)

app = typer.Typer(
    name="chat-archive-to-json",
    help="Convert a saved HTML messaging archive to per-user JSON message lists.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class _DroppedRecordTracker(logging.Handler):
    """Handler counting the message records the extractor dropped."""

    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.dropped = 0

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == MessageExtractor.__module__:
            self.dropped += 1


_dropped_tracker = _DroppedRecordTracker()


def _parse_log_level(log_level_str: str) -> int:
    """Parse log level from string (name or integer).

    Raises:
        ValueError: If log level is invalid
    """
    try:
        level_int = int(log_level_str)
    except ValueError:
        level_int = None
    if level_int is not None:
        if level_int < 0:
            raise ValueError("Log level must be non-negative")
        return level_int

    level_name = log_level_str.upper()
    level_map = {
        'CRITICAL': logging.CRITICAL,
        'ERROR': logging.ERROR,
        'WARNING': logging.WARNING,
        'INFO': logging.INFO,
        'DEBUG': logging.DEBUG,
    }
    if level_name in level_map:
        return level_map[level_name]

    raise ValueError(
        f"Invalid log level '{log_level_str}'. "
        f"Use log level names (CRITICAL, ERROR, WARNING, INFO, DEBUG) "
        f"or non-negative integers."
    )


def _setup_logging(verbose: int, quiet: int, log_level: str | None) -> int:
    """Configure logging from an explicit level shifted by -v/-q counts.

    Returns:
        The final log level that was set
    """
    base_level = _parse_log_level(log_level) if log_level is not None else logging.WARNING

    # 10-point steps, like the predefined levels
    level = max(0, base_level - (verbose - quiet) * 10)

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=True,  # Override any existing configuration
    )

    _dropped_tracker.dropped = 0
    logging.getLogger().addHandler(_dropped_tracker)

    LOGGER.info("Log level set to %d (%s)", level, logging.getLevelName(level))
    return level


@app.command()
def run(
    archive: Path = typer.Argument(..., help="Root directory of the unpacked archive"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write JSON to this file instead of stdout"
    ),
    jobs: int = typer.Option(0, "-j", "--jobs", min=0, help="Parallel workers (0: CPU count)"),
    encoding: str = typer.Option(DEFAULT_ENCODING, "--encoding", help="Encoding of the saved pages"),
    parser: str = typer.Option(
        DEFAULT_PARSER, "--parser", help=f"HTML parser ({', '.join(SUPPORTED_PARSERS)})"
    ),
    indent: Optional[int] = typer.Option(None, "--indent", min=0, help="Pretty-print JSON"),
    strict: bool = typer.Option(
        False, "--strict", help="Fail on the first malformed message instead of dropping it; "
        "unreadable pages are still collected and reported together"
    ),
    verbose: int = typer.Option(0, "-v", "--verbose", count=True, help="Increase verbosity"),
    quiet: int = typer.Option(0, "-q", "--quiet", count=True, help="Decrease verbosity"),
    log_level: Optional[str] = typer.Option(
        None, "-l", "--log-level", help="CRITICAL, ERROR, WARNING, INFO, DEBUG or an integer"
    ),
) -> None:
    """Extract every user's messages from ARCHIVE as JSON."""
    try:
        level = _setup_logging(verbose, quiet, log_level)
    except ValueError as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(1)

    if parser not in SUPPORTED_PARSERS:
        err_console.print(f"[red]Error: unsupported parser '{parser}'[/red]")
        raise typer.Exit(1)

    try:
        users = parse_archive(
            archive,
            MessageExtractor(strict=strict),
            encoding=encoding,
            parser=parser,
            jobs=jobs,
        )
    except (ArchiveError, OSError) as exc:
        LOGGER.critical("Processing failed: %s", exc, exc_info=level <= logging.DEBUG)
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(1)

    payload = archive_to_json(users, indent=indent)
    if output is None:
        typer.echo(payload)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        LOGGER.info("Output: %s", output)

    message_count = sum(len(u.messages) for u in users)
    if level <= logging.WARNING:
        err_console.print(
            f"[green]Extracted {message_count} messages for {len(users)} users[/green]"
        )

    if _dropped_tracker.dropped and level <= logging.ERROR:
        where = "" if level <= logging.WARNING else " Rerun without -q to see their pages."
        err_console.print(
            f"[yellow]{_dropped_tracker.dropped} malformed message(s) were dropped."
            f"{where} Use --strict to stop at the first one.[/yellow]"
        )


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"chat-archive-to-json {__version__}")


if __name__ == "__main__":
    app()
