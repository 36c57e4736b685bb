"""User-facing console output.

Build output and status lines go through a shared Rich console so they stay
separate from structlog diagnostics, which only print in debug mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from goreload.daemon.pipeline import BuildResult

_console = Console()

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info") -> None:
    """Print a styled status message."""
    prefix = _STYLES.get(style, "")
    _console.print(f"{prefix}{message}", highlight=False)


def print_build_output(result: BuildResult) -> None:
    """Print the combined output of a build step.

    The output is printed verbatim whether or not the build succeeded;
    compiler messages routinely contain square brackets, so Rich markup
    is disabled.
    """
    if not result.ok:
        _console.print(f"build error: exit status {result.returncode}", style="red", highlight=False)
    _console.print(
        result.output, markup=False, highlight=False, emoji=False, soft_wrap=True, end=""
    )
    if result.output and not result.output.endswith("\n"):
        _console.print()
