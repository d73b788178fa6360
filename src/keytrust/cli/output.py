#!/usr/bin/env python
"""
Output formatting with Rich console.
"""

from __future__ import annotations

from typing import Dict, Optional

from rich.console import Console
from rich.table import Table
from rich.theme import Theme


custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "success": "green",
})


class ConsoleOutput:
    """Console output with Rich formatting."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(theme=custom_theme)

    def print(self, text: str = "", **kwargs):
        self.console.print(text, **kwargs)

    def print_error(self, text: str):
        self.console.print(f"[red]Error:[/red] {text}")

    def print_success(self, text: str):
        self.console.print(f"[green]Success:[/green] {text}")

    def print_info(self, text: str):
        self.console.print(f"[cyan]Info:[/cyan] {text}")

    def print_counts(self, title: str, counts: Dict[str, int]):
        """Print a two-column table of counts."""
        table = Table(title=title)
        table.add_column("Decision", style="cyan")
        table.add_column("Keys", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        self.console.print(table)
