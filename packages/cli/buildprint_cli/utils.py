"""Console helpers shared by CLI commands."""

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def success(message: str) -> None:
    console.print(f"[bold green]✓[/bold green] {message}")


def warning(message: str) -> None:
    err_console.print(f"[bold yellow]⚠[/bold yellow] {message}")


def error(message: str) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
