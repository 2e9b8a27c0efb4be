"""Console output for the pathkit CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pathkit.types import PathInfo


class Output:
    """Rich console output (non-interactive)."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize output.

        Args:
            console: Console to print to. Defaults to stdout.
        """
        self.console = console or Console()

    def show_path_info(self, info: PathInfo) -> None:
        """Display a path summary table.

        Args:
            info: Summary to display.
        """
        table = Table(title=escape(info.path), show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for key, value in info.model_dump().items():
            table.add_row(key.replace("_", " "), escape(str(value)))
        self.console.print(table)

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]\u2713[/green] {escape(message)}")

    def show_error(self, message: str) -> None:
        """Show error message.

        Args:
            message: Error message.
        """
        self.console.print(f"[red]\u2717[/red] {escape(message)}")
