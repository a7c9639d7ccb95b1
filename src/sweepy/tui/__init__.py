"""Interactive terminal interface for sweepy."""

from sweepy.tui.app import SweepyApp, run_tui

__all__ = ["SweepyApp", "run_tui"]
