"""
Tests for probe-set configuration.
"""

import json
import tempfile
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from probes.adapters.probers.varsprobe import VarsProber
from probes.adapters.probers.webprobe import WebProber
from probes.application import config


class TestLoadConfig:
    """Tests for load_config."""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def _write(self, temp_dir, data):
        path = temp_dir / "probes.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def test_load_valid(self, temp_dir):
        """Test valid probes are loaded with defaults filled in."""
        path = self._write(
            temp_dir,
            {
                "alert": {"recipient": "oncall@example.com"},
                "probes": {
                    "home": {"type": "web", "url": "https://example.com/"},
                    "vars": {
                        "type": "vars",
                        "url": "https://example.com/debug/vars",
                        "key": "version",
                        "want_value": "1.0",
                    },
                },
            },
        )
        loaded = config.load_config(path)
        assert loaded["alert"] == {"recipient": "oncall@example.com"}
        home = loaded["probes"]["home"]
        assert home["method"] == "GET"
        assert home["code"] == 200
        assert home["in_response"] == ""
        assert home["body"] is None
        assert home["timeout"] == 30.0
        assert loaded["probes"]["vars"]["key"] == "version"

    def test_invalid_probe_skipped(self, temp_dir):
        """Test invalid probes are skipped, valid ones kept."""
        path = self._write(
            temp_dir,
            {
                "probes": {
                    "ok": {"type": "web", "url": "https://example.com/"},
                    "no_url": {"type": "web"},
                    "bad_type": {"type": "ftp", "url": "ftp://example.com/"},
                    "bad_code": {"type": "web", "url": "https://example.com/", "code": "200"},
                    "bad_timeout": {"type": "web", "url": "https://example.com/", "timeout": 0},
                }
            },
        )
        loaded = config.load_config(path)
        assert list(loaded["probes"]) == ["ok"]

    def test_missing_file(self, temp_dir):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            config.load_config(str(temp_dir / "missing.json"))

    def test_invalid_json(self, temp_dir):
        """Test malformed JSON raises ValueError."""
        path = temp_dir / "probes.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            config.load_config(str(path))

    def test_probes_must_be_dict(self, temp_dir):
        """Test the probes section must be a dict."""
        path = self._write(temp_dir, {"probes": []})
        with pytest.raises(ValueError, match="probes"):
            config.load_config(path)


class TestBuildProbes:
    """Tests for build_probes."""

    PROBES = {
        "home": {
            "type": "web",
            "url": "https://example.com/",
            "name": "",
            "desc": "",
            "timeout": 5,
            "method": "POST",
            "code": 201,
            "in_response": "created",
            "body": "{}",
        },
        "vars": {
            "type": "vars",
            "url": "https://example.com/debug/vars",
            "name": "vars",
            "desc": "version check",
            "timeout": 30.0,
            "key": "version",
            "want_value": "1.0",
        },
    }

    def test_build_all(self):
        """Test every configured probe is built with its options."""
        probes = config.build_probes(self.PROBES)

        home = probes["home"].prober
        assert isinstance(home, WebProber)
        assert home.method == "POST"
        assert home.want_code == 201
        assert home.want_in_response == "created"
        assert home.body == "{}"
        assert home.timeout == 5
        assert probes["home"].name == "WebProber_https://example.com/"

        vars_probe = probes["vars"]
        assert isinstance(vars_probe.prober, VarsProber)
        assert vars_probe.name == "vars"
        assert vars_probe.desc == "version check"
        assert vars_probe.interval == timedelta(minutes=5)

    def test_build_only(self):
        """Test only the selected probes are built."""
        probes = config.build_probes(self.PROBES, only=["vars"])
        assert list(probes) == ["vars"]

    def test_build_only_unknown(self):
        """Test selecting an unknown probe raises KeyError."""
        with pytest.raises(KeyError):
            config.build_probes(self.PROBES, only=["missing"])

    def test_alert_fn_override(self):
        """Test a custom alert function is set on every prober."""
        alert_fn = MagicMock()
        probes = config.build_probes(self.PROBES, alert_fn=alert_fn)
        assert all(p.prober.alert_fn is alert_fn for p in probes.values())
