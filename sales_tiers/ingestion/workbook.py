"""
Spreadsheet decoder for sales-by-practice workbooks.

Format — ``.xlsx`` (openpyxl) or legacy ``.xls`` (xlrd), first sheet only,
first row is the header.  Required columns (names configurable):

  Practice  — practice name (the grouping key)
  Sales     — sales amount; numbers or numeric strings

Other columns are ignored.  Cells are coerced by :class:`RawRecord`:
empty practice cells exclude the row, empty or non-numeric sales count as 0.

Errors
------
  WorkbookReadError    — the file could not be read (missing, permissions).
  WorkbookDecodeError  — the bytes are not a readable spreadsheet, or the
                         required columns are absent.

Both derive from :class:`WorkbookError` so callers can catch either.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Union

import pandas as pd

from sales_tiers.models.record import RawRecord

logger = logging.getLogger(__name__)

DEFAULT_GROUP_COLUMN = "Practice"
DEFAULT_AMOUNT_COLUMN = "Sales"
SUPPORTED_EXTENSIONS: tuple[str, ...] = (".xlsx", ".xls")

WorkbookSource = Union[bytes, Path]


class WorkbookError(Exception):
    """Base class for workbook loading failures."""


class WorkbookReadError(WorkbookError):
    """The workbook file could not be read from disk."""


class WorkbookDecodeError(WorkbookError, ValueError):
    """The workbook bytes are unreadable or lack the required columns."""


def is_supported_file(name: str) -> bool:
    """Return True if ``name`` has a ``.xlsx`` or ``.xls`` extension."""
    return Path(name).suffix.lower() in SUPPORTED_EXTENSIONS


def read_workbook_bytes(path: Path) -> bytes:
    """Read ``path`` into memory.

    Raises:
        WorkbookReadError: If the file does not exist or cannot be read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise WorkbookReadError(f"Cannot read workbook {path}: {exc}") from exc


def read_workbook(
    source: WorkbookSource,
    group_column: str = DEFAULT_GROUP_COLUMN,
    amount_column: str = DEFAULT_AMOUNT_COLUMN,
) -> list[RawRecord]:
    """Decode the first sheet of a workbook into validated records.

    Args:
        source:        Raw workbook bytes, or a path to a workbook file.
        group_column:  Header of the practice column.
        amount_column: Header of the sales column.

    Returns:
        One :class:`RawRecord` per data row, in sheet order.

    Raises:
        WorkbookReadError:   If ``source`` is a path that cannot be read.
        WorkbookDecodeError: If the content is not a spreadsheet or the
            required columns are missing.
    """
    data = read_workbook_bytes(source) if isinstance(source, Path) else source

    try:
        # Keep "NA", "None", "null" etc. as text; empty cells arrive as "".
        frame = pd.read_excel(io.BytesIO(data), sheet_name=0, header=0, keep_default_na=False)
    except Exception as exc:
        raise WorkbookDecodeError(f"Not a readable spreadsheet: {exc}") from exc

    actual_cols = {str(c) for c in frame.columns}
    missing = [c for c in (group_column, amount_column) if c not in actual_cols]
    if missing:
        raise WorkbookDecodeError(
            f"Workbook missing required columns: {missing}\n"
            f"Found columns: {sorted(actual_cols)}"
        )

    frame.columns = [str(c) for c in frame.columns]
    rows = frame[[group_column, amount_column]].to_dict(orient="records")
    if not rows:
        logger.warning("Workbook has a header row but no data rows")

    records = records_from_rows(rows, group_column, amount_column)
    logger.info(
        "Decoded %d rows (%d with a %s)",
        len(records), sum(1 for r in records if r.has_key), group_column,
    )
    return records


def records_from_rows(
    rows: Iterable[Mapping[str, Any]],
    group_column: str = DEFAULT_GROUP_COLUMN,
    amount_column: str = DEFAULT_AMOUNT_COLUMN,
) -> list[RawRecord]:
    """Convert decoded row mappings into :class:`RawRecord` objects.

    Missing keys are treated as absent cells.
    """
    return [
        RawRecord(group_key=row.get(group_column), amount=row.get(amount_column))
        for row in rows
    ]
