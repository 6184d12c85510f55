"""
Invoice inventory and expectation lookup.

Maps an invoice index to its image file (``invoice-<index>.jpg``) and to the
expected record at the same position in the expectation file.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .config import IMAGE_EXTENSIONS, IMAGE_PREFIX, VerifierConfig, logger
from .exceptions import PreconditionError
from .schemas import ExpectedRecord


@dataclass(frozen=True)
class ResolvedInvoice:
    """An invoice image located on disk together with its expected record."""
    index: int
    file_name: str
    image_path: Path
    expected: ExpectedRecord


def load_expected_records(expected_file: Path) -> list[ExpectedRecord]:
    """
    Load the expectation file: a JSON array with one object per invoice.

    Raises:
        PreconditionError: if the file is missing or not a JSON array of objects
    """
    expected_file = Path(expected_file)
    if not expected_file.exists():
        raise PreconditionError(f"Expectation file not found: {expected_file}")

    try:
        with open(expected_file, "r", encoding="utf-8") as f:
            records = json.load(f)
    except json.JSONDecodeError as e:
        raise PreconditionError(f"Expectation file is not valid JSON: {expected_file} ({e})") from e

    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise PreconditionError(
            f"Expectation file must contain a JSON array of objects: {expected_file}"
        )
    return records


class InvoiceSource:
    """Resolves invoice indices to image files and expected records."""

    def __init__(
        self,
        invoice_dir: Path,
        expected: Sequence[ExpectedRecord],
        extensions: Sequence[str] = IMAGE_EXTENSIONS,
    ):
        self.invoice_dir = Path(invoice_dir)
        self.expected = list(expected)
        self.extensions = tuple(extensions)

    @classmethod
    def from_config(cls, config: VerifierConfig) -> "InvoiceSource":
        expected = load_expected_records(config.expected_file)
        if not config.invoice_dir.is_dir():
            raise PreconditionError(f"Invoice directory not found: {config.invoice_dir}")
        return cls(config.invoice_dir, expected)

    @property
    def expected_count(self) -> int:
        return len(self.expected)

    def image_count(self) -> int:
        """Number of image files in the inventory directory. Extensions are case-sensitive."""
        if not self.invoice_dir.is_dir():
            return 0
        return sum(
            1 for p in self.invoice_dir.iterdir()
            if p.is_file() and p.suffix in self.extensions
        )

    def check_inventory(self) -> int:
        """
        Ensure every image has an expected record and vice versa.

        Returns:
            The number of invoices available for a run

        Raises:
            PreconditionError: if the counts differ
        """
        images = self.image_count()
        if images != self.expected_count:
            raise PreconditionError(
                f"Number of invoice images ({images}) does not match the number of "
                f"expected records ({self.expected_count})."
            )
        return images

    def image_name(self, index: int) -> str:
        """Canonical file name for an index, using the primary extension."""
        return f"{IMAGE_PREFIX}{index}{self.extensions[0]}"

    def resolve(self, index: int) -> Optional[ResolvedInvoice]:
        """
        Locate the image and expected record for an index.

        Returns None when no image exists for the index, or the index has
        no expected record.
        """
        if not 0 <= index < self.expected_count:
            return None

        for ext in self.extensions:
            path = self.invoice_dir / f"{IMAGE_PREFIX}{index}{ext}"
            if path.is_file():
                return ResolvedInvoice(
                    index=index,
                    file_name=path.name,
                    image_path=path,
                    expected=self.expected[index],
                )

        logger.debug(f"No image found for index {index} in {self.invoice_dir}")
        return None
