"""Rich terminal display for sweepy."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from sweepy.models import CleanupResult, ScanConfig, ScanResult, ScanStats, format_size

console = Console()


def staleness_color(days: int) -> str:
    """Color for a staleness value: older projects are louder."""
    if days > 365:
        return "red"
    elif days > 180:
        return "yellow"
    elif days > 90:
        return "cyan"
    return "green"


def format_staleness(days: int) -> str:
    """Styled staleness label."""
    color = staleness_color(days)
    return f"[{color}]{days} days[/{color}]"


def show_results(results: list[ScanResult]) -> None:
    """Display scan results as a table."""
    if not results:
        console.print("[yellow]No node_modules directories found.[/yellow]")
        return

    table = Table(title="Scan Results", show_header=True, header_style="bold")
    table.add_column("Project")
    table.add_column("Path", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Last Modified", justify="right")
    table.add_column("Staleness", justify="right")

    for result in results:
        table.add_row(
            result.project_name,
            result.path,
            result.size_human,
            result.last_modified.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
            format_staleness(result.staleness_days),
        )

    console.print(table)


def show_stats(stats: ScanStats, config: ScanConfig) -> None:
    """Display aggregate statistics for a scan."""
    body = (
        f"Path: [bold]{config.path}[/bold] | Staleness: {config.staleness} days | "
        f"Cache: {not config.no_cache}\n"
        f"Found [bold]{stats.count}[/bold] node_modules directories\n"
        f"Total Size: [bold]{format_size(stats.total_size)}[/bold] | "
        f"Avg Staleness: {stats.avg_staleness:.2f} days | "
        f"Scan Duration: {stats.scan_duration:.2f}s"
    )
    console.print(Panel(body, title="Summary", expand=False))


def show_cleanup_result(result: CleanupResult) -> None:
    """Display result of a single deletion."""
    if result.success and result.index_stale:
        console.print(f"  [yellow]![/yellow] {result.path}: deleted, but {result.error}")
    elif result.success:
        console.print(f"  [green]✓[/green] {result.path}: deleted")
    else:
        console.print(f"  [red]✗[/red] {result.path}: {result.error}")


def show_scanning_progress() -> Progress:
    """Create a spinner for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
