import json
from pathlib import Path

import pytest

from invoice_verify.config import VerifierConfig


EXPECTED_RECORDS = [
    {"cnpj": "12.345.678/0001-90", "total": 105.9, "date": "2024-03-01"},
    {"cnpj": "98.765.432/0001-10", "total": 42.0, "date": "2024-03-02"},
    {"cnpj": "11.222.333/0001-44", "total": 7.5, "date": "2024-03-03"},
]


@pytest.fixture
def workspace(tmp_path) -> Path:
    """A token file, an expectation file and a matching image directory."""
    (tmp_path / "token.json").write_text(json.dumps({"token": "secret-token"}), encoding="utf-8")
    (tmp_path / "expected.json").write_text(json.dumps(EXPECTED_RECORDS), encoding="utf-8")

    invoice_dir = tmp_path / "all"
    invoice_dir.mkdir()
    for index in range(len(EXPECTED_RECORDS)):
        (invoice_dir / f"invoice-{index}.jpg").write_bytes(b"\xff\xd8\xff fake jpeg")

    (tmp_path / "reports").mkdir()
    return tmp_path


@pytest.fixture
def config(workspace) -> VerifierConfig:
    return VerifierConfig(
        token_file=workspace / "token.json",
        expected_file=workspace / "expected.json",
        invoice_dir=workspace / "all",
        output_dir=workspace / "reports",
        api_url="https://extraction.test/info/receipt",
    )


@pytest.fixture
def expected_records() -> list[dict]:
    return [dict(record) for record in EXPECTED_RECORDS]
