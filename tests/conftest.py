"""
Shared pytest fixtures for the Sales Tiers test suite.

Provides:
  - ``make_records``: build ``RawRecord`` lists from (practice, sales) pairs.
  - ``ten_practices``: 10 distinct practices with sales 100, 90, ..., 10.
  - ``quiet_config``: an ``AppConfig`` that logs nowhere on disk.
  - ``write_workbook``: write rows to an ``.xlsx`` file (pandas + openpyxl).
  - ``sample_workbook``: a small on-disk workbook with duplicate practices,
    a blank practice cell and a string sales value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pandas as pd
import pytest

from sales_tiers.config import AppConfig, DataConfig, LoggingConfig
from sales_tiers.models.record import RawRecord


@pytest.fixture
def make_records() -> Callable[[list[tuple[Any, Any]]], list[RawRecord]]:
    def _make(pairs: list[tuple[Any, Any]]) -> list[RawRecord]:
        return [RawRecord(group_key=key, amount=amount) for key, amount in pairs]

    return _make


@pytest.fixture
def ten_practices(make_records) -> list[RawRecord]:
    """Practices P1..P10 with sales 100 down to 10 (already in rank order)."""
    return make_records([(f"P{i}", 110 - i * 10) for i in range(1, 11)])


@pytest.fixture
def quiet_config(tmp_path: Path) -> AppConfig:
    """Default config with no log file and outputs under ``tmp_path``."""
    return AppConfig(
        data=DataConfig(
            default_workbook=str(tmp_path / "default.xlsx"),
            output_dir=str(tmp_path / "outputs"),
        ),
        logging=LoggingConfig(log_file=""),
    )


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Return a writer: ``write_workbook(rows, name="sales.xlsx") -> Path``."""

    def _write(rows: list[dict[str, Any]], name: str = "sales.xlsx", columns=None) -> Path:
        path = tmp_path / name
        frame = pd.DataFrame(rows, columns=columns)
        frame.to_excel(path, index=False)
        return path

    return _write


SAMPLE_ROWS: list[dict[str, Any]] = [
    {"Practice": "North Clinic", "Sales": 1200.0, "Region": "N"},
    {"Practice": "South Clinic", "Sales": 800.0, "Region": "S"},
    {"Practice": "North Clinic", "Sales": 300.25, "Region": "N"},
    {"Practice": None, "Sales": 5000.0, "Region": "?"},
    {"Practice": "East Clinic", "Sales": "50.5", "Region": "E"},
]


@pytest.fixture
def sample_workbook(write_workbook) -> Path:
    return write_workbook(SAMPLE_ROWS)
