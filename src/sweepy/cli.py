"""CLI interface for sweepy."""

import threading
from pathlib import Path
from typing import Optional

import typer

from sweepy import __version__
from sweepy.cleaner import delete_many
from sweepy.display import (
    confirm_action,
    console,
    show_cleanup_result,
    show_results,
    show_scanning_progress,
    show_stats,
)
from sweepy.exceptions import ScanError, StalenessParseError
from sweepy.logs import setup_logging
from sweepy.models import ScanConfig, ScanResult, ScanStats
from sweepy.parsing import parse_staleness
from sweepy.progress import ProgressChannel
from sweepy.scanner import scan

# Create Typer app
app = typer.Typer(
    name="sweepy",
    help="Find and remove stale node_modules directories",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"sweepy version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Write the log here instead of ./sweepy_log.txt"
    ),
    debug: bool = typer.Option(False, "--debug", help="Log at debug level"),
) -> None:
    """sweepy - your terminal janitor for node_modules."""
    setup_logging(verbose=debug, log_file=log_file)


def build_config(
    path: Optional[str],
    staleness: str,
    no_cache: bool,
    reset_cache: bool,
    verbose: bool,
    full_walk: bool,
    workers: Optional[int],
) -> ScanConfig:
    """Turn command-line options into a ScanConfig, exiting on bad input."""
    try:
        days = parse_staleness(staleness)
    except StalenessParseError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    return ScanConfig(
        path=path or str(Path.cwd()),
        staleness=days,
        no_cache=no_cache,
        reset_cache=reset_cache,
        verbose=verbose,
        full_walk=full_walk,
        max_workers=workers,
    )


def run_scan(config: ScanConfig) -> tuple[list[ScanResult], ScanStats]:
    """Run a scan on a worker thread while showing its progress."""
    channel = ProgressChannel()
    outcome: dict = {}

    def worker():
        try:
            outcome["value"] = scan(config, channel)
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()

    with show_scanning_progress() as progress:
        task = progress.add_task(f"Scanning {config.path}...", total=None)
        for line in channel:
            if config.verbose:
                progress.console.print(f"[dim]{line}[/dim]")
            progress.update(task, description=line)

    thread.join()

    error = outcome.get("error")
    if isinstance(error, ScanError):
        console.print(f"[red]Error scanning directory: {error}[/red]")
        raise typer.Exit(1)
    if error is not None:
        raise error
    return outcome["value"]


# Shared scan options
PathArgument = typer.Argument(None, help="Directory to scan (default: current directory)")
StalenessOption = typer.Option(
    "0", "--staleness", "-s", help="Only show projects untouched for this long (e.g. 30, 30d, 48h)"
)
NoCacheOption = typer.Option(False, "--no-cache", help="Do not read or write the scan cache")
ResetCacheOption = typer.Option(False, "--reset-cache", help="Discard the scan cache and rebuild it")
VerboseOption = typer.Option(False, "--verbose", "-V", help="Show every directory as it is scanned")
FullWalkOption = typer.Option(
    False, "--full-walk", help="Walk the filesystem even if cached results exist"
)
WorkersOption = typer.Option(None, "--workers", "-w", min=1, help="Measurement threads")


@app.command(name="scan")
def scan_command(
    path: Optional[str] = PathArgument,
    staleness: str = StalenessOption,
    no_cache: bool = NoCacheOption,
    reset_cache: bool = ResetCacheOption,
    verbose: bool = VerboseOption,
    full_walk: bool = FullWalkOption,
    workers: Optional[int] = WorkersOption,
) -> None:
    """Scan a directory for node_modules and show size and staleness."""
    config = build_config(path, staleness, no_cache, reset_cache, verbose, full_walk, workers)

    results, stats = run_scan(config)

    show_results(results)
    console.print()
    show_stats(stats, config)

    if results:
        console.print()
        console.print("[dim]Run [bold]sweepy clean <path>[/bold] to delete a directory[/dim]")


@app.command()
def clean(
    paths: list[str] = typer.Argument(..., help="node_modules directories to delete"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
) -> None:
    """Delete node_modules directories and update the scan cache."""
    console.print("[bold]About to delete:[/bold]")
    for p in paths:
        console.print(f"  • {p}")

    if not yes:
        console.print()
        if not confirm_action("Proceed with cleanup?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    results = delete_many(paths)

    for result in results:
        show_cleanup_result(result)

    if any(not r.success for r in results):
        raise typer.Exit(1)


@app.command()
def tui(
    path: Optional[str] = PathArgument,
    staleness: str = StalenessOption,
    no_cache: bool = NoCacheOption,
    reset_cache: bool = ResetCacheOption,
    verbose: bool = VerboseOption,
    full_walk: bool = FullWalkOption,
    workers: Optional[int] = WorkersOption,
) -> None:
    """Browse scan results interactively and delete with the space bar."""
    config = build_config(path, staleness, no_cache, reset_cache, verbose, full_walk, workers)
    try:
        from sweepy.tui import run_tui
    except ImportError:
        console.print("[red]TUI not available.[/red]")
        console.print("Install with: [bold]pip install sweepy[tui][/bold]")
        raise typer.Exit(1)

    run_tui(config)


if __name__ == "__main__":
    app()
