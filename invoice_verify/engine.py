"""
Verification engine for extraction API quality control.

This module submits invoice images to the extraction API one at a time,
compares each response with the expected record, and writes the batch
report. Submissions are strictly sequential so the per-token rate limit is
respected and results stay in index order.
"""

from typing import Optional

from .comparator import compare_fields
from .client import ExtractionClient
from .config import VerifierConfig, load_token, logger
from .exceptions import (
    AuthenticationError,
    BatchAbortedError,
    ExtractionAPIError,
    InvalidRangeError,
)
from .reports import ReportStore
from .schemas import InvoiceResult, InvoiceStatus, Report
from .source import InvoiceSource

FILE_NOT_FOUND_MESSAGE = "Invoice file not found."
SUCCESS_MESSAGE = "API response matches the expected values."
FAILURE_MESSAGE = "Differences found."


def validate_range(start: int, end: int, total: int) -> None:
    """Require 0 <= start <= end < total."""
    if start < 0 or end >= total or start > end:
        raise InvalidRangeError(start, end, total)


class VerificationEngine:
    """Runs verification batches over an index range."""

    def __init__(self, source: InvoiceSource, client: ExtractionClient, store: ReportStore):
        self.source = source
        self.client = client
        self.store = store

    @classmethod
    def from_config(cls, config: VerifierConfig) -> "VerificationEngine":
        """
        Build an engine from file locations.

        Raises:
            PreconditionError: missing token, expectation file or invoice directory
        """
        token = load_token(config.token_file)
        source = InvoiceSource.from_config(config)
        client = ExtractionClient(config.api_url, token, timeout=config.request_timeout)
        return cls(source, client, ReportStore(config.output_dir))

    def run_all(self) -> Report:
        """Verify every invoice in the inventory."""
        total = self.source.check_inventory()
        return self.run(0, total - 1)

    def run(self, start: int, end: int) -> Report:
        """
        Verify invoices ``start`` through ``end`` (inclusive) and save the report.

        Raises:
            PreconditionError: inventory mismatch or invalid range; nothing is
                submitted or written
            BatchAbortedError: the API rejected the token; the results gathered
                so far are attached and no report is written
        """
        total = self.source.check_inventory()
        validate_range(start, end, total)

        logger.info(f"Verifying invoices {start}..{end} of {total}")
        results: list[InvoiceResult] = []

        for index in range(start, end + 1):
            try:
                result = self.verify_invoice(index)
            except AuthenticationError as e:
                logger.error(f"Batch aborted at index {index}: {e.message}")
                raise BatchAbortedError(e.message, results=results) from e
            results.append(result)

        path = self.store.write_report(results)
        report = Report(results=results, path=path)

        summary = report.summary
        logger.info(
            f"Verification complete: {summary.successes} success, "
            f"{summary.failures} failure, {summary.errors} error"
        )
        return report

    def verify_invoice(self, index: int) -> InvoiceResult:
        """
        Submit one invoice and classify the outcome.

        Raises:
            AuthenticationError: propagated from the client so the batch can abort
        """
        invoice = self.source.resolve(index)
        if invoice is None:
            logger.warning(f"Invoice {index}: image not found")
            return InvoiceResult(
                file=self.source.image_name(index),
                status=InvoiceStatus.ERROR.value,
                message=FILE_NOT_FOUND_MESSAGE,
            )

        try:
            actual = self.client.submit(invoice.image_path)
        except ExtractionAPIError as e:
            logger.warning(f"Invoice {index} ({invoice.file_name}): {e.message}")
            return InvoiceResult(
                file=invoice.file_name,
                status=InvoiceStatus.ERROR.value,
                message=e.message,
            )

        differences = compare_fields(invoice.expected, actual)
        status = InvoiceStatus.FAILURE if differences else InvoiceStatus.SUCCESS
        logger.info(f"Invoice {index} ({invoice.file_name}): {status.value}")

        return InvoiceResult(
            file=invoice.file_name,
            status=status.value,
            message=FAILURE_MESSAGE if differences else SUCCESS_MESSAGE,
            differences=differences,
            actual=actual if isinstance(actual, dict) else None,
            expected=invoice.expected,
        )


def format_report_text(results: list[InvoiceResult], path: Optional[str] = None) -> str:
    """
    Format run results as human-readable text for CLI output.

    Args:
        results: Invoice results in index order
        path: Where the report was saved, if it was

    Returns:
        Formatted string for display
    """
    lines = [
        "=" * 50,
        "FINAL RESULT",
        "=" * 50,
        f"Total invoices tested: {len(results)}",
    ]

    for result in results:
        lines.append(f"Invoice: {result.file} | Status: {result.status}")
        if result.status != InvoiceStatus.SUCCESS.value:
            lines.append(f"  Reason: {result.message}")
            if result.differences:
                lines.append("  Differences: " + "; ".join(str(d) for d in result.differences))

    lines.append("=" * 50)
    if path:
        lines.append(f"Report saved to: {path}")

    return "\n".join(lines)
