"""
Configuration constants and settings for the Invoice Extraction Verifier.
"""

import json
import logging
import os
from pathlib import Path
from typing import Final

from pydantic import BaseModel, Field

from .exceptions import PreconditionError

# ============================================================================
# Extraction API
# ============================================================================

API_URL: Final[str] = os.getenv(
    "EXTRACTION_API_URL", "https://api-sandbox.oxpay.com.br/info/receipt"
)

# Seconds to wait for a single submission before giving up on that invoice
REQUEST_TIMEOUT: Final[float] = float(os.getenv("REQUEST_TIMEOUT", "60"))

# Multipart field that carries the image binary
UPLOAD_FIELD_NAME: Final[str] = "file"

# ============================================================================
# File Locations
# ============================================================================

TOKEN_FILE: Final[str] = os.getenv("VERIFIER_TOKEN_FILE", "token.json")
EXPECTED_FILE: Final[str] = os.getenv("VERIFIER_EXPECTED_FILE", "expected.json")
INVOICE_DIR: Final[str] = os.getenv("VERIFIER_INVOICE_DIR", "all")
OUTPUT_DIR: Final[str] = os.getenv("VERIFIER_OUTPUT_DIR", ".")

# ============================================================================
# Naming Conventions
# ============================================================================

# Images are named invoice-<index><ext>; extensions are tried in order
IMAGE_PREFIX: Final[str] = "invoice-"
IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (".jpg", ".jpeg")

RESULT_FILE_PREFIX: Final[str] = "result_"
REPORT_EXTENSION: Final[str] = ".json"

# ============================================================================
# Runtime Settings
# ============================================================================

class VerifierConfig(BaseModel):
    """
    Locations and API settings for a verification session.

    Passed explicitly to the engine so tests can point it at temporary
    directories and fake collaborators.
    """
    token_file: Path = Field(Path(TOKEN_FILE), description="JSON file holding the bearer token")
    expected_file: Path = Field(Path(EXPECTED_FILE), description="JSON array of expected records")
    invoice_dir: Path = Field(Path(INVOICE_DIR), description="Directory of invoice images")
    output_dir: Path = Field(Path(OUTPUT_DIR), description="Directory for report files")
    api_url: str = Field(API_URL, description="Extraction API endpoint")
    request_timeout: float = Field(REQUEST_TIMEOUT, gt=0, description="Per-request timeout in seconds")

    @classmethod
    def from_env(cls, **overrides) -> "VerifierConfig":
        """Build a config from the environment defaults, ignoring None overrides."""
        return cls(**{k: v for k, v in overrides.items() if v is not None})


def load_token(token_file: Path) -> str:
    """
    Read the bearer token from a JSON file shaped like {"token": "..."}.

    Raises:
        PreconditionError: if the file is missing, not JSON, or has no usable token
    """
    token_file = Path(token_file)
    if not token_file.exists():
        raise PreconditionError(f"Token file not found: {token_file}")

    try:
        with open(token_file, "r", encoding="utf-8") as f:
            token_data = json.load(f)
    except json.JSONDecodeError as e:
        raise PreconditionError(f"Token file is not valid JSON: {token_file} ({e})") from e

    token = token_data.get("token") if isinstance(token_data, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise PreconditionError(f"Invalid or missing token in {token_file}")
    return token.strip()


# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("invoice_verify")


logger = setup_logging()
