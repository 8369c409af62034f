"""Rich console utilities for styled output.

This module provides a consistent interface for all output of the sync,
whether it runs under the Lambda runtime (plain text captured by CloudWatch)
or interactively from the CLI.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# Styles referenced by the markup in the helpers below
_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

# Writes to stdout, which the Lambda runtime forwards to CloudWatch
console = Console(theme=_THEME)


def info(message: str) -> None:
    """Report a neutral fact about the run, such as the resolved region."""
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Confirm that a secret was created or updated in the cluster.

    Args:
        message: Confirmation naming the secret and its namespace.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Report a condition that does not fail the run, like a skipped secret."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Report the failure that aborted the run.

    Args:
        message: Description of the failed step.

    """
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Announce the start of a synchronization."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Announce one call of the run (vault fetch, cluster lookup, write)."""
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Mark up a secret, namespace or cluster name for emphasis."""
    return f"[highlight]{text}[/highlight]"


def summary_panel(title: str, items: dict[str, str]) -> None:
    """Print the outcome of a CLI run as a two-column panel.

    Args:
        title: Panel title.
        items: Field name mapped to value, shown in insertion order.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{label}:", value)

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def plain(text: str) -> None:
    """Print text verbatim, without markup or highlighting."""
    console.print(text, markup=False, highlight=False)
