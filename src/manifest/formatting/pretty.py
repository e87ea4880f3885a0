"""
Pretty Formatter

Terminal output for local runs.
"""

import threading
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..models.inspection import Import
from ..models.result import Comment, Result, Severity
from .base import Formatter


SEVERITY_STYLES = {
    Severity.ERROR: ("red", "✗"),
    Severity.WARN: ("yellow", "!"),
    Severity.INFO: ("blue", "i"),
}


class PrettyFormatter(Formatter):
    """Prints each checker's diagnostics as a block."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        # Results arrive from concurrent checkers; keep each block together
        self._lock = threading.Lock()

    def format(self, source: str, inspection_import: Import, result: Result) -> None:
        with self._lock:
            self.console.print(f"[bold]{escape(source)}[/bold]")

            if result.failure:
                self.console.print(f"  [red]failure:[/red] {escape(result.failure)}")

            if not result.comments:
                self.console.print("  [green]✓[/green] no findings")
                return

            for comment in result.comments:
                self.console.print(self._render(comment))

    def _render(self, comment: Comment) -> str:
        style, icon = SEVERITY_STYLES[comment.severity]
        location = ""
        if comment.is_line_scoped:
            location = f"[cyan]{escape(comment.file)}:{comment.line}[/cyan] "

        lines = comment.text.split("\n")
        rendered = f"  [{style}]{icon}[/{style}] {location}{escape(lines[0])}"
        for line in lines[1:]:
            rendered += f"\n    {escape(line)}"
        return rendered
