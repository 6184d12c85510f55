"""
Invoice Extraction Verifier

Submits a batch of invoice images to a document-extraction API, compares the
extracted fields with expected values, and keeps JSON reports for later
analysis and export.
"""

__version__ = "0.1.0"
__author__ = "Invoice QC Team"

from .schemas import Difference, InvoiceResult, InvoiceStatus, Report, ExportKind
from .comparator import compare_fields
from .engine import VerificationEngine
from .reports import ReportStore, partition_results

__all__ = [
    "Difference",
    "InvoiceResult",
    "InvoiceStatus",
    "Report",
    "ExportKind",
    "compare_fields",
    "VerificationEngine",
    "ReportStore",
    "partition_results",
]
