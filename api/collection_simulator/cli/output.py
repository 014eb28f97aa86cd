"""Output formatting utilities for CLI.

Follows the golden rule:
- stdout = machine-readable data (JSON)
- stderr = human-readable logs (progress, errors, info, tables)

This lets `collect-sim status --json | jq` work while colored logs still
reach the terminal.
"""

import json
import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

# stderr console for human logs (preserves colors when redirected)
console = Console(stderr=True)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging through rich on stderr.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def output_json(data: Any, indent: Optional[int] = 2):
    """Output JSON to stdout (machine-readable).

    Args:
        data: Data to serialize as JSON; datetimes are written as ISO strings
        indent: Indentation level (None for compact)
    """
    print(json.dumps(data, indent=indent, default=str), flush=True)


def log_info(message: str, quiet: bool = False):
    """Log info message to stderr.

    Args:
        message: Message to log
        quiet: If True, suppress output
    """
    if not quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def log_success(message: str, quiet: bool = False):
    """Log success message to stderr.

    Args:
        message: Message to log
        quiet: If True, suppress output
    """
    if not quiet:
        console.print(f"[green]✓[/green] {message}")


def log_error(message: str):
    """Log error message to stderr (always shown)."""
    console.print(f"[red]✗[/red] {message}", style="bold red")


def log_warning(message: str, quiet: bool = False):
    if not quiet:
        console.print(f"[yellow]⚠[/yellow] {message}")
