"""
Tests for the probes CLI.
"""

import json
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from probes.core.entities import ProbeResult
from probes.core.errors import TransportError
from probes.interface import cli


@pytest.fixture
def config_path():
    """Write a probe-set config file and return its path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "probes.json"
        path.write_text(
            json.dumps(
                {
                    "alert": {
                        "sender": "probes@example.com",
                        "recipient": "oncall@example.com",
                    },
                    "probes": {
                        "home": {"type": "web", "url": "https://example.com/"},
                        "api": {"type": "web", "url": "https://api.example.com/"},
                    },
                }
            ),
            encoding="utf-8",
        )
        yield str(path)


def _probe(result):
    probe = MagicMock()
    probe.run_once.return_value = result
    return probe


class TestRun:
    """Tests for cli.run."""

    @patch("probes.interface.cli.build_probes")
    @patch("probes.interface.cli.alert_config.configure")
    def test_all_pass(self, mock_configure, mock_build, config_path, capsys):
        """Test exit code 0 when every probe passes."""
        mock_build.return_value = {
            "home": _probe(ProbeResult.passed_result()),
            "api": _probe(ProbeResult.passed_result()),
        }

        exit_code = cli.run(config_path)

        assert exit_code == 0
        mock_configure.assert_called_once()
        installed = mock_configure.call_args.args[0]
        assert installed.recipient == "oncall@example.com"
        assert "PASS home" in capsys.readouterr().out

    @patch("probes.interface.cli.build_probes")
    @patch("probes.interface.cli.alert_config.configure")
    def test_failure(self, mock_configure, mock_build, config_path, capsys):
        """Test exit code 3 and the diagnostic when a probe fails."""
        mock_build.return_value = {
            "home": _probe(ProbeResult.passed_result()),
            "api": _probe(ProbeResult.failed_with(TransportError("failed to send HTTP request: refused"))),
        }

        exit_code = cli.run(config_path)

        assert exit_code == 3
        out = capsys.readouterr().out
        assert "FAIL api: failed to send HTTP request: refused" in out

    @patch("probes.interface.cli.build_probes")
    @patch("probes.interface.cli.alert_config.configure")
    def test_dry_run_uses_log_alert(self, mock_configure, mock_build, config_path):
        """Test dry-run logs alerts and leaves email alerting unconfigured."""
        mock_build.return_value = {}

        exit_code = cli.run(config_path, only=["home"], dry_run=True)

        assert exit_code == 0
        mock_configure.assert_not_called()
        kwargs = mock_build.call_args.kwargs
        assert kwargs["alert_fn"] is cli.log_alert
        assert kwargs["only"] == ["home"]

    @patch("probes.interface.cli.alert_config.configure")
    def test_unknown_probe(self, mock_configure, config_path):
        """Test selecting an unknown probe fails."""
        assert cli.run(config_path, only=["missing"]) == 3

    def test_missing_config(self):
        """Test a missing config file fails."""
        assert cli.run("/nonexistent/probes.json") == 3


class TestMain:
    """Tests for cli.main argument handling."""

    @patch("probes.interface.cli.run")
    def test_main_passes_arguments(self, mock_run):
        """Test CLI arguments are forwarded to run."""
        mock_run.return_value = 0
        exit_code = cli.main(["probes.json", "--only", "home", "--only", "api", "--dry-run"])
        assert exit_code == 0
        mock_run.assert_called_once_with("probes.json", only=["home", "api"], dry_run=True)

    @patch("probes.interface.cli.run")
    def test_main_interrupted(self, mock_run):
        """Test Ctrl-C exits with 130."""
        mock_run.side_effect = KeyboardInterrupt
        assert cli.main(["probes.json"]) == 130

    def test_log_alert(self, caplog):
        """Test the dry-run alert function logs the alert."""
        cli.log_alert("home", "desc", 3, [])
        assert "would alert: home failed (badness 3)" in caplog.text
