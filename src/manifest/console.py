"""Rich-powered console output for manifest."""

from rich.console import Console as RichConsole
from rich.markup import escape


class Console:
    """Status messages for the CLI."""

    def __init__(self, stderr: bool = False) -> None:
        self.console = RichConsole(stderr=stderr)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def detail(self, label: str, message: str) -> None:
        self.console.print(f"[red]{escape(label)}[/red] {escape(message)}")
