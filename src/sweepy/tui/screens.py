"""TUI screens for sweepy."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, RichLog, Static

from sweepy.cleaner import delete_node_module
from sweepy.display import format_size, format_staleness
from sweepy.exceptions import CacheReconcileError, CleanupError, ScanError
from sweepy.models import ScanConfig, ScanResult
from sweepy.progress import ProgressChannel
from sweepy.scanner import scan

DELETING = "[DELETING...] "
DELETED = "[DELETED] "
FAILED = "[FAILED] "


class ResultsScreen(Screen):
    """Runs the scan and lists the results."""

    BINDINGS = [
        Binding("space", "delete", "Delete"),
    ]

    def __init__(self, config: ScanConfig):
        super().__init__()
        self.config = config
        self.results: dict[str, ScanResult] = {}
        self.deleted: set[str] = set()
        self.in_flight: set[str] = set()

    def compose(self) -> ComposeResult:
        yield Header()

        with Container(id="main-container"):
            yield Static("[bold]Scanning...[/bold]", id="stats")
            yield RichLog(id="progress-log", markup=True)
            yield DataTable(id="results-table")

        yield Footer()

    def on_mount(self) -> None:
        """Initialize the screen and start scanning."""
        table = self.query_one("#results-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Project", key="project")
        table.add_column("Path", key="path")
        table.add_column("Size", key="size")
        table.add_column("Last Modified", key="modified")
        table.add_column("Staleness", key="staleness")

        channel = ProgressChannel()
        log = self.query_one("#progress-log", RichLog)
        self.run_worker(lambda: self._listen(channel, log), thread=True)
        self.run_worker(lambda: self._scan(channel), thread=True)

    # -- workers (off the UI thread) ---------------------------------------

    def _listen(self, channel: ProgressChannel, log: RichLog) -> None:
        for line in channel:
            self.app.call_from_thread(log.write, f"[dim]{line}[/dim]")

    def _scan(self, channel: ProgressChannel) -> None:
        try:
            results, stats = scan(self.config, channel)
        except ScanError as e:
            self.app.call_from_thread(self._show_error, str(e))
            return
        self.app.call_from_thread(self._show_results, results, stats)

    def _delete(self, result: ScanResult) -> None:
        try:
            delete_node_module(result.path)
        except CacheReconcileError as e:
            self.app.call_from_thread(self._on_deleted, result, str(e))
        except CleanupError as e:
            self.app.call_from_thread(self._on_failed, result, str(e))
        else:
            self.app.call_from_thread(self._on_deleted, result, None)

    # -- UI updates ----------------------------------------------------------

    def _show_error(self, message: str) -> None:
        stats = self.query_one("#stats", Static)
        stats.update(f"[red]An error occurred:[/red]\n{message}\n\nPress q to quit.")

    def _show_results(self, results, stats) -> None:
        table = self.query_one("#results-table", DataTable)
        table.clear()

        for result in results:
            self.results[result.path] = result
            table.add_row(
                result.project_name,
                result.path,
                result.size_human,
                result.last_modified.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
                format_staleness(result.staleness_days),
                key=result.path,
            )

        self.query_one("#stats", Static).update(
            f"Path: {self.config.path} | Staleness: {self.config.staleness} days | "
            f"Cache: {not self.config.no_cache}\n"
            f"Found {stats.count} node_modules directories | "
            f"Total Size: {format_size(stats.total_size)} | "
            f"Avg Staleness: {stats.avg_staleness:.2f} days | "
            f"Scan Duration: {stats.scan_duration:.2f}s"
        )
        table.focus()

    def _set_project_label(self, path: str, prefix: str) -> None:
        table = self.query_one("#results-table", DataTable)
        table.update_cell(path, "project", prefix + self.results[path].project_name)

    def _on_deleted(self, result: ScanResult, warning: str | None) -> None:
        self.in_flight.discard(result.path)
        self.deleted.add(result.path)
        self._set_project_label(result.path, DELETED)
        if warning:
            self.notify(warning, severity="warning", timeout=5)
        else:
            self.notify(f"Freed {format_size(result.size_bytes)}", timeout=3)

    def _on_failed(self, result: ScanResult, message: str) -> None:
        self.in_flight.discard(result.path)
        self._set_project_label(result.path, FAILED)
        self.notify(message, severity="error", timeout=5)

    def action_delete(self) -> None:
        """Delete the highlighted node_modules directory."""
        table = self.query_one("#results-table", DataTable)
        if table.row_count == 0:
            return

        path = str(table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value)
        if path in self.deleted or path in self.in_flight:
            return

        self.in_flight.add(path)
        self._set_project_label(path, DELETING)
        result = self.results[path]
        self.run_worker(lambda: self._delete(result), thread=True)
