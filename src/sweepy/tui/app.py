"""Main TUI application for sweepy."""

from textual.app import App
from textual.binding import Binding

from sweepy.models import ScanConfig
from sweepy.tui.screens import ResultsScreen


class SweepyApp(App):
    """Interactive node_modules browser."""

    TITLE = "sweepy"
    SUB_TITLE = "Your terminal janitor"

    DEFAULT_CSS = """
    #progress-log {
        height: 8;
        border: round $secondary;
    }
    #stats {
        padding: 0 1;
        border: round $secondary;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("?", "help", "Help"),
    ]

    def __init__(self, config: ScanConfig):
        super().__init__()
        self.config = config

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        self.push_screen(ResultsScreen(self.config))

    def action_help(self) -> None:
        """Show help information."""
        self.notify(
            "Use arrow keys to navigate, Space to delete the highlighted node_modules, Q to quit",
            title="Help",
            timeout=5,
        )


def run_tui(config: ScanConfig) -> None:
    """Scan with config and browse the results interactively."""
    app = SweepyApp(config)
    app.run()
