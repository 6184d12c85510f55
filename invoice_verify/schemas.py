"""
Pydantic models for verification results and reports.

This module defines the core data structures used throughout the verifier:
- Difference for a single mismatched field
- InvoiceResult for the outcome of one submitted invoice
- Report, ReportSummary and ReportPartition for batch-level views
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Expected values for one invoice, keyed by field name
ExpectedRecord = dict[str, Any]

# Whatever the extraction API returned for one invoice
ActualRecord = dict[str, Any]


class InvoiceStatus(str, Enum):
    """Classification of a single invoice outcome."""
    SUCCESS = "Success"
    FAILURE = "Failure"
    ERROR = "Error"


class ExportKind(str, Enum):
    """Report subsets that can be exported. The value is the filename prefix."""
    SUCCESS = "success"
    FAILURES = "failures"
    ERRORS = "errors"
    FAILURES_ERRORS = "failures_errors"


class Difference(BaseModel):
    """
    A field whose extracted value does not match the expected value.

    Attributes:
        field: Name of the compared field
        expected: Value from the expectation file
        actual: Value returned by the API (None when the field was absent)
    """
    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Name of the mismatched field")
    expected: Any = Field(None, description="Expected value")
    actual: Any = Field(None, description="Value returned by the API")

    def __str__(self) -> str:
        return f"Field: {self.field}, expected: {self.expected}, received: {self.actual}"


class InvoiceResult(BaseModel):
    """
    Outcome of verifying one invoice image.

    Unknown keys are kept so that reports written by other tools survive a
    load/export cycle unchanged.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        json_schema_extra={
            "examples": [
                {
                    "file": "invoice-3.jpg",
                    "status": "Failure",
                    "message": "Differences found.",
                    "differences": [
                        {"field": "total", "expected": 105.9, "actual": 105.09}
                    ],
                    "actual": {"total": 105.09, "cnpj": "12.345.678/0001-90"},
                    "expected": {"total": 105.9, "cnpj": "12.345.678/0001-90"},
                }
            ]
        },
    )

    file: str = Field(..., description="Image file name")
    status: str = Field(..., description="Success, Failure or Error")
    message: str = Field("", description="Human-readable outcome")
    differences: list[Union[Difference, str]] = Field(
        default_factory=list,
        description="Mismatched fields (empty unless the status is Failure)",
    )
    actual: Optional[ActualRecord] = Field(None, description="Record returned by the API")
    expected: Optional[ExpectedRecord] = Field(None, description="Expected record")

    def to_json_dict(self) -> dict:
        """
        Serialize for a report file.

        Absent records are left out, and so is ``differences`` when it was never
        set, as for error items.
        """
        exclude = {name for name in ("actual", "expected") if getattr(self, name) is None}
        if "differences" not in self.model_fields_set:
            exclude.add("differences")
        return self.model_dump(mode="json", exclude=exclude)


class ReportSummary(BaseModel):
    """Counts for a report, as shown after a run or during analysis."""
    total: int = Field(..., ge=0)
    successes: int = Field(..., ge=0)
    failures: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)


class ReportPartition(BaseModel):
    """A report split by classification."""
    successes: list[InvoiceResult] = Field(default_factory=list)
    failures: list[InvoiceResult] = Field(default_factory=list)
    errors: list[InvoiceResult] = Field(default_factory=list)

    @property
    def failures_and_errors(self) -> list[InvoiceResult]:
        return self.failures + self.errors

    def select(self, kind: ExportKind) -> list[InvoiceResult]:
        """Return the subset matching an export kind."""
        if kind == ExportKind.SUCCESS:
            return self.successes
        if kind == ExportKind.FAILURES:
            return self.failures
        if kind == ExportKind.ERRORS:
            return self.errors
        return self.failures_and_errors


class Report(BaseModel):
    """
    Ordered invoice results of one run, in ascending index order.

    ``path`` points at the backing file once the report has been written or
    loaded.
    """
    model_config = ConfigDict(frozen=True)

    results: list[InvoiceResult] = Field(default_factory=list)
    path: Optional[Path] = Field(None, description="Report file location")

    @property
    def name(self) -> Optional[str]:
        return self.path.name if self.path else None

    @property
    def summary(self) -> ReportSummary:
        from .reports import summarize
        return summarize(self.results)
