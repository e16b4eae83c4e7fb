"""Console logging for proto2fetch runs."""

import logging
from collections.abc import Mapping
from typing import Any

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table


class Proto2FetchLogger(logging.Logger):
    """
    Logger writing through rich, with a few helpers for the generation report.

    Regular records go through a ``RichHandler``; ``success``, ``hint``,
    ``rule`` and ``summary`` print straight to the console and are not records.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(console=self.console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def hint(self, message: str) -> None:
        """Print a dimmed follow-up line, e.g. a suggested flag."""
        self.console.print(message, style="dim")

    def rule(self, title: str) -> None:
        self.console.rule(f"[bold blue]{title}")

    def summary(self, title: str, rows: Mapping[str, Any]) -> None:
        """
        Print a borderless two-column table, e.g. the counts of a parsed schema.

        Args:
            title: Caption printed above the table
            rows: Labels and their values, in display order
        """
        table = Table(title=title, title_justify="left", box=box.SIMPLE, show_header=False)
        table.add_column(style="dim")
        table.add_column(justify="right")
        for label, value in rows.items():
            table.add_row(label, str(value))
        self.console.print(table)


def get_logger(name: str = "proto2fetch") -> Proto2FetchLogger:
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(Proto2FetchLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    return logger  # type: ignore[return-value]
