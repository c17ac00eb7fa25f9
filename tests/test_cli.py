"""Tests for the command-line interface."""

import json

import pytest
import structlog

from lma_bridge.cli import main


@pytest.fixture(autouse=True)
def reset_structlog():
    """main() configures structlog globally; undo it after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def agreement_file(tmp_path, canonical_agreement):
    path = tmp_path / "agreement.txt"
    path.write_text(canonical_agreement, encoding="utf-8")
    return path


class TestExtractCommand:
    """Test suite for `lma-bridge extract`."""

    def test_prints_result_json(self, agreement_file, capsys):
        """The raw pattern result is printed as camelCase JSON."""
        assert main(["extract", str(agreement_file)]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["data"]["facilityAmount"] == 500_000_000
        assert payload["data"]["currency"] == "USD"


class TestAnalyzeCommand:
    """Test suite for `lma-bridge analyze`."""

    def test_summary_output(self, agreement_file, capsys):
        """The default output is a human-readable summary."""
        assert main(["analyze", str(agreement_file), "--strategy", "local"]) == 0

        out = capsys.readouterr().out
        assert "Method:      pattern" in out
        assert "500,000,000.00" in out

    def test_json_output(self, agreement_file, capsys):
        """--json prints the response envelope."""
        assert main(["analyze", str(agreement_file), "--strategy", "local", "--json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is True
        assert payload["method"] == "pattern"

    def test_missing_file(self, tmp_path, capsys):
        """Load errors are reported on stderr with a non-zero exit."""
        assert main(["analyze", str(tmp_path / "missing.pdf")]) == 1
        assert "Document not found" in capsys.readouterr().err

    def test_requires_command(self):
        """A subcommand is required."""
        with pytest.raises(SystemExit):
            main([])
