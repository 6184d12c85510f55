"""
Exception types for the Invoice Extraction Verifier.

Precondition failures stop a run before it starts, per-item API errors are
recorded in the report, and an authentication failure aborts the whole batch.
"""

from typing import Optional


class VerifierError(Exception):
    """Base class for all verifier errors. Carries a human-readable message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionError(VerifierError):
    """A required input is missing or inconsistent; the run does not start."""


class InvalidRangeError(PreconditionError):
    """The requested index range is outside the invoice inventory."""

    def __init__(self, start: int, end: int, total: int):
        super().__init__(
            f"Invalid range {start}..{end}: indices must satisfy "
            f"0 <= start <= end < {total}."
        )
        self.start = start
        self.end = end
        self.total = total


class ExtractionAPIError(VerifierError):
    """A single submission failed for a reason other than authentication."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(VerifierError):
    """The API rejected the credential (HTTP 401)."""


class BatchAbortedError(VerifierError):
    """
    A batch stopped on an authentication failure.

    ``results`` holds the invoice results accumulated before the failing item.
    They are not persisted.
    """

    def __init__(self, message: str, results: list):
        super().__init__(message)
        self.results = results


class ReportParseError(VerifierError):
    """A report file could not be read as a list of invoice results."""
