"""Tests for CLI interface."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from sweepy.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    """Keep sweepy_log.txt out of the source tree."""
    monkeypatch.chdir(tmp_path)


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "sweepy version" in result.stdout

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "sweepy version" in result.stdout


class TestHelp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "scan" in result.stdout
        assert "clean" in result.stdout

    def test_scan_help(self):
        result = runner.invoke(app, ["scan", "--help"])
        assert result.exit_code == 0
        assert "--staleness" in result.stdout
        assert "--no-cache" in result.stdout


class TestScanCommand:
    def test_scan_reports_results(self, project_tree):
        root, _ = project_tree
        result = runner.invoke(app, ["scan", str(root), "--no-cache"])
        assert result.exit_code == 0
        assert "Found 3" in result.stdout

    def test_scan_with_staleness(self, project_tree):
        root, _ = project_tree
        result = runner.invoke(app, ["scan", str(root), "--no-cache", "-s", "365d"])
        assert result.exit_code == 0
        assert "No node_modules" in result.stdout

    def test_invalid_staleness(self, project_tree):
        root, _ = project_tree
        result = runner.invoke(app, ["scan", str(root), "-s", "soon"])
        assert result.exit_code == 1
        assert "Invalid staleness" in result.stdout

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path / "missing"), "--no-cache"])
        assert result.exit_code == 1
        assert "Error scanning directory" in result.stdout

    def test_unexpected_scan_error_propagates(self, project_tree):
        root, _ = project_tree

        def broken(config, progress):
            progress.close()
            raise RuntimeError("disk vanished")

        with patch("sweepy.cli.scan", side_effect=broken):
            result = runner.invoke(app, ["scan", str(root), "--no-cache"])

        assert result.exit_code != 0
        assert isinstance(result.exception, RuntimeError)
        assert "disk vanished" in str(result.exception)

    def test_scan_writes_cache(self, project_tree, isolated_cache):
        root, _ = project_tree
        result = runner.invoke(app, ["scan", str(root)])
        assert result.exit_code == 0
        assert len(json.loads(isolated_cache.path.read_text())["data"]) == 3

    def test_verbose_prints_progress(self, project_tree):
        root, _ = project_tree
        result = runner.invoke(app, ["scan", str(root), "--no-cache", "--verbose"])
        assert result.exit_code == 0
        assert "Scanning" in result.stdout

    def test_writes_log_file(self, project_tree, tmp_path):
        root, _ = project_tree
        log_file = tmp_path / "scan.log"
        result = runner.invoke(app, ["--log-file", str(log_file), "scan", str(root), "--no-cache"])
        assert result.exit_code == 0
        assert "Scanned" in log_file.read_text()


class TestCleanCommand:
    def test_clean_with_yes(self, project_tree):
        _, candidates = project_tree
        result = runner.invoke(app, ["clean", str(candidates[0]), "-y"])
        assert result.exit_code == 0
        assert not candidates[0].exists()

    @patch("sweepy.cli.confirm_action")
    def test_clean_cancelled(self, mock_confirm, project_tree):
        mock_confirm.return_value = False
        _, candidates = project_tree
        result = runner.invoke(app, ["clean", str(candidates[0])])
        assert result.exit_code == 0
        assert "Cancelled" in result.stdout
        assert candidates[0].exists()

    def test_clean_missing_path(self, tmp_path):
        result = runner.invoke(app, ["clean", str(tmp_path / "node_modules"), "-y"])
        assert result.exit_code == 1
        assert "✗" in result.stdout


class TestTuiCommand:
    @patch("sweepy.tui.run_tui")
    def test_tui_receives_config(self, mock_run, project_tree):
        root, _ = project_tree
        result = runner.invoke(app, ["tui", str(root), "-s", "48h", "--reset-cache"])
        assert result.exit_code == 0
        config = mock_run.call_args.args[0]
        assert config.path == str(root)
        assert config.staleness == 2
        assert config.reset_cache
