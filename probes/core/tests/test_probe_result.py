"""
Tests for core entities and errors.
"""

import pytest

from probes.core.entities import ProbeResult
from probes.core.errors import (
    ContentMismatchError,
    CredentialMissingError,
    StatusMismatchError,
    ValueMismatchError,
)


class TestProbeResult:
    """Tests for ProbeResult."""

    def test_passed(self):
        """Test a plain passed result."""
        result = ProbeResult.passed_result()
        assert result.passed is True
        assert result.error is None
        assert result.message == ""

    def test_passed_with(self):
        """Test a passed result carrying info and target."""
        result = ProbeResult.passed_with("vars ok", "http://h/debug/vars")
        assert result.passed is True
        assert result.info == "vars ok"
        assert result.target == "http://h/debug/vars"
        assert result.message == ""

    def test_failed_with(self):
        """Test a failed result exposes the error message."""
        error = StatusMismatchError(200, 503)
        result = ProbeResult.failed_with(error)
        assert result.passed is False
        assert result.error is error
        assert result.message == "bad HTTP response status; want 200, got 503"

    def test_immutable(self):
        """Test results cannot be changed after construction."""
        result = ProbeResult.passed_result()
        with pytest.raises(AttributeError):
            result.passed = False  # type: ignore[misc]


class TestErrors:
    """Tests for error messages."""

    def test_content_mismatch_includes_body(self):
        """Test the full body and wanted substring are in the message."""
        error = ContentMismatchError("ok", "down")
        assert "'ok'" in str(error)
        assert "down" in str(error)

    def test_value_mismatch_missing_key(self):
        """Test a missing key reads differently from a wrong value."""
        assert "not found" in str(ValueMismatchError("k", "v", None))
        assert "want 'v', got 'w'" in str(ValueMismatchError("k", "v", "w"))

    def test_credential_missing_names_setting(self):
        """Test the missing credential and its setting are named."""
        error = CredentialMissingError("password", "SMTP_PASSWORD")
        assert str(error) == "no mail provider password specified - set SMTP_PASSWORD"
