"""Rich console rendering for CLI output."""

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .autolinks.models import Autolink
from .remotes.base import RemoteProvider
from .remotes.registry import ProviderEntry
from .types import LocalInfo

console = Console()


def print_linkified(text: str, markdown: bool):
    """Print linkified text, rendering markdown when requested."""
    console.print()
    console.print(
        Panel(
            Markdown(text) if markdown else Text(text),
            title="[bold white]Linkified[/bold white]",
            border_style="green",
            padding=(1, 2),
        )
    )


def print_provider(provider: RemoteProvider):
    """Print a summary of the provider serving a remote."""
    table = Table(box=box.ROUNDED, border_style="cyan", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Provider", f"{provider.name} ({provider.id})")
    table.add_row("Domain", provider.domain)
    table.add_row("Path", provider.path)
    table.add_row("Repository", provider.get_url_for_repository())
    table.add_row("Custom", "yes" if provider.custom else "no")
    console.print(table)


def print_entries(entries: tuple[ProviderEntry, ...]):
    """Print the registry's matchers in evaluation order."""
    table = Table(box=box.ROUNDED, border_style="cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Matcher", style="cyan")
    table.add_column("Kind")
    for i, entry in enumerate(entries, 1):
        matcher = entry.matcher if isinstance(entry.matcher, str) else f"/{entry.matcher.pattern}/"
        table.add_row(str(i), matcher, "custom" if entry.custom else "built-in")
    console.print(table)


def print_autolinks(autolinks: dict[str, Autolink]):
    """Print detected references."""
    if not autolinks:
        console.print("[dim]No references found.[/dim]")
        return
    table = Table(box=box.ROUNDED, border_style="cyan")
    table.add_column("Reference", style="cyan")
    table.add_column("URL")
    for key, autolink in autolinks.items():
        table.add_row(key, autolink.url)
    console.print(table)


def print_local_info(info: LocalInfo):
    """Print a URL mapped back to the working tree."""
    location = info.path
    if info.start_line is not None:
        location += f":{info.start_line}"
        if info.end_line is not None and info.end_line != info.start_line:
            location += f"-{info.end_line}"
    console.print(f"[bold green]{location}[/bold green]")


def print_url(url: str):
    """Print a built URL."""
    console.print(f"[link={url}]{url}[/link]")


def print_error(message: str):
    """Print an error message."""
    console.print(f"\n[red]Error: {message}[/red]")


def print_info(message: str):
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")
