"""
Tests for the command-line interface.
"""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from invoice_verify.cli import app
from invoice_verify.reports import ReportStore
from invoice_verify.schemas import Difference, InvoiceResult


runner = CliRunner()


@pytest.fixture
def base_args(config) -> list[str]:
    return [
        "--token-file", str(config.token_file),
        "--expected-file", str(config.expected_file),
        "--invoice-dir", str(config.invoice_dir),
        "--output-dir", str(config.output_dir),
        "--api-url", config.api_url,
    ]


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    return response


class TestRunCommand:

    @patch("invoice_verify.client.requests.post")
    def test_run_all_saves_report(self, mock_post, base_args, config, expected_records):
        mock_post.side_effect = [_response(payload=r) for r in expected_records]

        result = runner.invoke(app, base_args + ["run"])

        assert result.exit_code == 0, result.output
        assert "Total invoices tested: 3" in result.output
        assert "Report saved to:" in result.output
        assert len(ReportStore(config.output_dir).list_reports()) == 1

    @patch("invoice_verify.client.requests.post")
    def test_run_range(self, mock_post, base_args, expected_records):
        mock_post.return_value = _response(payload=expected_records[1])

        result = runner.invoke(app, base_args + ["run", "--start", "1", "--end", "1"])

        assert result.exit_code == 0, result.output
        assert "Invoice: invoice-1.jpg | Status: Success" in result.output
        assert mock_post.call_count == 1

    @patch("invoice_verify.client.requests.post")
    def test_invalid_range(self, mock_post, base_args):
        result = runner.invoke(app, base_args + ["run", "--start", "2", "--end", "1"])

        assert result.exit_code == 1
        assert "Invalid range" in result.output
        mock_post.assert_not_called()

    @patch("invoice_verify.client.requests.post")
    def test_authentication_failure_exits_without_report(self, mock_post, base_args, config, expected_records):
        mock_post.side_effect = [_response(payload=expected_records[0]), _response(status_code=401)]

        result = runner.invoke(app, base_args + ["run"])

        assert result.exit_code == 2
        assert "Fatal: Error 401" in result.output
        assert "Total invoices tested: 1" in result.output
        assert ReportStore(config.output_dir).list_reports() == []

    def test_missing_token(self, base_args, config):
        config.token_file.unlink()

        result = runner.invoke(app, base_args + ["run"])

        assert result.exit_code == 1
        assert "Token file not found" in result.output


class TestReportCommands:

    def test_reports_empty(self, base_args):
        result = runner.invoke(app, base_args + ["reports"])
        assert result.exit_code == 0
        assert "No report files found." in result.output

    @patch("invoice_verify.client.requests.post")
    def test_analyze_and_export(self, mock_post, base_args, config, expected_records):
        failing = dict(expected_records[2], total=0)
        mock_post.side_effect = [
            _response(payload=expected_records[0]),
            _response(payload=expected_records[1]),
            _response(payload=failing),
        ]
        runner.invoke(app, base_args + ["run"])
        store = ReportStore(config.output_dir)
        name = store.list_reports()[0]

        listing = runner.invoke(app, base_args + ["reports"])
        assert f"1 - {name}" in listing.output

        result = runner.invoke(app, base_args + ["analyze", name, "--export", "failures"])

        assert result.exit_code == 0, result.output
        assert "Successes:   2" in result.output
        assert "Failures:    1" in result.output
        exported = store.load("failures_" + name[len("result_"):])
        assert [r.file for r in exported.results] == ["invoice-2.jpg"]

    def test_analyze_corrupt_report(self, base_args, config):
        (config.output_dir / "result_1_bad.json").write_text("not json", encoding="utf-8")

        result = runner.invoke(app, base_args + ["analyze", "result_1_bad.json"])

        assert result.exit_code == 1
        assert "not valid JSON" in result.output


class TestMenu:

    def test_exit_immediately(self, base_args):
        result = runner.invoke(app, base_args + ["menu"], input="0\n")
        assert result.exit_code == 0
        assert "MAIN MENU" in result.output
        assert "Exiting..." in result.output

    def test_analysis_menu_exports_failures_and_errors(self, base_args, config):
        store = ReportStore(config.output_dir)
        source = store.write_report([
            InvoiceResult(file="invoice-0.jpg", status="Success", message="ok", differences=[]),
            InvoiceResult(
                file="invoice-1.jpg",
                status="Failure",
                message="Differences found.",
                differences=[Difference(field="total", expected=42.0, actual=24.0)],
            ),
            InvoiceResult(file="invoice-2.jpg", status="Error", message="timeout"),
        ])

        # analyze -> file 1 -> another file -> file 1 -> export failures+errors -> exit
        result = runner.invoke(app, base_args + ["menu"], input="3\n1\n1\n1\n5\n0\n")

        assert result.exit_code == 0, result.output
        assert result.output.count("TEST RESULTS") == 2
        assert "Results exported to:" in result.output
        assert "Exiting..." in result.output
        exported = store.load("failures_errors_" + source.name[len("result_"):])
        assert [r.file for r in exported.results] == ["invoice-1.jpg", "invoice-2.jpg"]

    def test_analysis_menu_survives_corrupt_report(self, base_args, config):
        (config.output_dir / "result_1_bad.json").write_text("not json", encoding="utf-8")

        # analyze -> file 1 (corrupt) -> invalid file number -> back in main menu -> exit
        result = runner.invoke(app, base_args + ["menu"], input="3\n1\n2\n0\n")

        assert result.exit_code == 0, result.output
        assert "not valid JSON" in result.output
        assert "Invalid option." in result.output
        assert result.output.count("MAIN MENU") == 2
        assert "Exiting..." in result.output


def test_status(base_args):
    result = runner.invoke(app, base_args + ["status"])
    assert result.exit_code == 0
    assert "Expected records: 3" in result.output
    assert "Invoice images:   3" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "v0.1.0" in result.output
