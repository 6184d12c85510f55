"""
Report persistence and analysis.

Reports are JSON arrays of invoice results named
``result_<count>_invoices_<timestamp>.json``. Exported subsets swap the
``result_`` prefix for the subset kind, e.g. ``failures_3_invoices_...json``.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import ValidationError

from .config import REPORT_EXTENSION, RESULT_FILE_PREFIX, logger
from .exceptions import ReportParseError
from .schemas import (
    ExportKind,
    InvoiceResult,
    InvoiceStatus,
    Report,
    ReportPartition,
    ReportSummary,
)


def partition_results(results: Iterable[InvoiceResult]) -> ReportPartition:
    """
    Split results into successes, failures and errors.

    A Failure without a message is counted as an error so nothing is dropped.
    """
    partition = ReportPartition()
    for result in results:
        if result.status == InvoiceStatus.SUCCESS.value:
            partition.successes.append(result)
        elif result.status == InvoiceStatus.FAILURE.value and result.message:
            partition.failures.append(result)
        else:
            partition.errors.append(result)
    return partition


def summarize(results: Iterable[InvoiceResult]) -> ReportSummary:
    results = list(results)
    partition = partition_results(results)
    return ReportSummary(
        total=len(results),
        successes=len(partition.successes),
        failures=len(partition.failures),
        errors=len(partition.errors),
    )


def format_summary_text(summary: ReportSummary) -> str:
    """Format report counts for CLI output."""
    lines = [
        "=" * 50,
        "TEST RESULTS",
        "=" * 50,
        f"Total tests: {summary.total}",
        f"Successes:   {summary.successes}",
        f"Failures:    {summary.failures}",
        f"Errors:      {summary.errors}",
        "=" * 50,
    ]
    return "\n".join(lines)


def report_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO timestamp safe for file names, e.g. 2026-10-19T08-30-12-345Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3] + "Z"


def derive_export_name(source_name: str, kind: ExportKind) -> str:
    """Name of an exported subset, derived from the source report name."""
    base = Path(source_name).name
    if base.startswith(RESULT_FILE_PREFIX):
        base = base[len(RESULT_FILE_PREFIX):]
    return f"{ExportKind(kind).value}_{base}"


class ReportStore:
    """Reads and writes report files in a single output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def list_reports(self) -> list[str]:
        """Report file names in the output directory, in filesystem order."""
        if not self.output_dir.is_dir():
            return []
        return [
            p.name for p in self.output_dir.iterdir()
            if p.is_file()
            and p.name.startswith(RESULT_FILE_PREFIX)
            and p.name.endswith(REPORT_EXTENSION)
        ]

    def report_path(self, name: Union[str, Path]) -> Path:
        return self.output_dir / name

    def load(self, name: Union[str, Path]) -> Report:
        """
        Load a report file.

        Raises:
            ReportParseError: if the file is missing, not JSON, or not a list
                of invoice results
        """
        path = self.report_path(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ReportParseError(f"Report file not found: {path}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Could not parse report {path}: {e}")
            raise ReportParseError(f"Report file is not valid JSON: {path} ({e})") from e

        if not isinstance(data, list):
            raise ReportParseError(f"Report file must contain a JSON array: {path}")

        try:
            results = [InvoiceResult.model_validate(item) for item in data]
        except ValidationError as e:
            logger.error(f"Report {path} does not match the result format: {e}")
            raise ReportParseError(f"Report file has invalid entries: {path}") from e

        return Report(results=results, path=path)

    def write_report(self, results: list[InvoiceResult]) -> Path:
        """
        Persist a run's results under a new, unique file name.

        The name embeds the item count and a UTC timestamp; a numeric suffix
        is added if a report with the same name already exists.
        """
        stem = f"{RESULT_FILE_PREFIX}{len(results)}_invoices_{report_timestamp()}"
        path = self.report_path(stem + REPORT_EXTENSION)
        suffix = 1
        while path.exists():
            path = self.report_path(f"{stem}-{suffix}{REPORT_EXTENSION}")
            suffix += 1

        self._write(results, path)
        logger.info(f"Report with {len(results)} result(s) saved to {path}")
        return path

    def export(
        self,
        results: list[InvoiceResult],
        source_name: Union[str, Path],
        kind: ExportKind,
    ) -> Path:
        """Write a subset of a report next to it, overwriting any earlier export."""
        path = self.report_path(derive_export_name(str(source_name), kind))
        self._write(results, path)
        logger.info(f"Exported {len(results)} result(s) to {path}")
        return path

    def _write(self, results: list[InvoiceResult], path: Path) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump([r.to_json_dict() for r in results], f, indent=2, ensure_ascii=False)
