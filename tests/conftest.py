# tests/conftest.py
from __future__ import annotations

import json
from pathlib import Path

import pytest
from loguru import logger

from eod_positions.pipeline.context import PipelineContext

POSITIONS_HEADER = "Instrument,Account,AccountType,Quantity"


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def write_transactions(tmp_path: Path):
    """
    rows -> JSON array file. A str is written as-is (for malformed input).
    """

    def _write(rows, name: str = "Input_Transactions.txt") -> Path:
        p = tmp_path / name
        if isinstance(rows, str):
            p.write_text(rows, encoding="utf-8")
        else:
            p.write_text(json.dumps(rows, indent=2), encoding="utf-8")
        return p

    return _write


@pytest.fixture
def write_positions(tmp_path: Path):
    """
    data lines -> positions file with the standard header line.
    """

    def _write(lines, name: str = "Input_StartOfDay_Positions.txt", header: str = POSITIONS_HEADER) -> Path:
        p = tmp_path / name
        p.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
        return p

    return _write


@pytest.fixture
def sample_transactions():
    return [
        {"TransactionId": 1, "Instrument": "X", "TransactionType": "B", "TransactionQuantity": 100},
        {"TransactionId": 2, "Instrument": "X", "TransactionType": "S", "TransactionQuantity": 40},
        {"TransactionId": 3, "Instrument": "Y", "TransactionType": "B", "TransactionQuantity": 10},
    ]


@pytest.fixture
def make_test_pipeline_context(tmp_path: Path):
    """
    Factory fixture for PipelineContext; every path lives under tmp_path.
    """

    def _make(**overrides) -> PipelineContext:
        fields = dict(
            positions_file=tmp_path / "Input_StartOfDay_Positions.txt",
            transactions_file=tmp_path / "Input_Transactions.txt",
            output_file=tmp_path / "out" / "Expected_EndOfDay_Positions.txt",
            errors_file=tmp_path / "out" / "Input_StartOfDay_Positions_Error_Records.txt",
        )
        fields.update(overrides)
        fields["output_file"].parent.mkdir(parents=True, exist_ok=True)
        fields["errors_file"].parent.mkdir(parents=True, exist_ok=True)
        return PipelineContext(**fields)

    return _make
