"""
Console management for kafka-health.

Provides the rich consoles used for human readable log output, configuration
display and command line errors.
"""

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text


class ConsoleManager:
    """Terminal output for log records, errors and the settings table."""

    def __init__(self) -> None:
        """Create one console for stdout and one for stderr."""
        self.console = Console()
        self.error_console = Console(stderr=True)

    def print(self, message: str, style: str | None = None) -> None:
        """Print a message to the standard console without markup parsing."""
        self.console.print(Text(message, style=style or ""), highlight=False)

    def print_error(self, message: str) -> None:
        """Write an error line to stderr."""
        self.error_console.print(
            Text.assemble(("Error: ", "bold red"), message), highlight=False
        )

    def print_warning(self, message: str) -> None:
        """Write a warning line to stderr."""
        self.error_console.print(
            Text.assemble(("Warning: ", "yellow"), message), highlight=False
        )

    def print_note(self, message: str, error: Exception | None = None) -> None:
        """Write a note to stderr, followed by the error text when given."""
        if error:
            text = Text.assemble(
                ("Note: ", "yellow"), message, ": ", (str(error), "red")
            )
        else:
            text = Text.assemble(("Note: ", "yellow"), message)
        self.error_console.print(text, highlight=False)

    def print_config_table(self, config_data: dict[str, Any]) -> None:
        """Render settings as a two column table on stdout."""
        table = Table(title="kafka-health settings", show_header=True)
        table.add_column("Setting", style="bold")
        table.add_column("Value")

        for key, value in config_data.items():
            table.add_row(str(key), str(value))

        self.console.print(table)


# Shared by the CLI and the console log handler
console_manager = ConsoleManager()
