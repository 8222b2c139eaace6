"""
Dashboard session state as explicit values.

The dashboard shows one classification at a time together with the current
file name and, at most, one error message.  Instead of keeping those in
scattered mutable globals, every load returns a brand-new
``DashboardState``; the UI stores only the latest one.

Transitions
-----------
  initial_state()                        -> nothing loaded yet
  load_default_workbook(config, prev)    -> classify ``config.data.default_workbook``
  load_uploaded_workbook(config, name, data, prev)
                                         -> classify user-supplied bytes

Failure handling:
  - The previous classification stays visible; only ``error`` changes.
  - Read failures and decode failures each map to one user-facing message.
  - A successful load always clears ``error``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from sales_tiers.config import AppConfig
from sales_tiers.ingestion.workbook import (
    WorkbookDecodeError,
    WorkbookReadError,
    WorkbookSource,
    is_supported_file,
)
from sales_tiers.models.record import ClassificationResult
from sales_tiers.pipeline.classify import ClassifyStage

logger = logging.getLogger(__name__)

READ_ERROR_MESSAGE = "Error reading the file. Please try again."
UNSUPPORTED_FILE_MESSAGE = "Unsupported file type. Please choose an .xlsx or .xls file."


def decode_error_message(config: AppConfig) -> str:
    """User-facing message for a workbook that cannot be analyzed."""
    return (
        "Error analyzing the Excel file. Please make sure it contains "
        f'"{config.columns.group_column}" and "{config.columns.amount_column}" columns.'
    )


class DashboardState(BaseModel):
    """Everything the dashboard needs to render one frame.

    Attributes:
        result:    The classification currently shown.
        file_name: Name of the workbook most recently loaded (or attempted).
        error:     User-facing message from the last failed load, else ``None``.
        loaded:    ``False`` until the first load attempt has finished.
    """

    model_config = ConfigDict(frozen=True)

    result: ClassificationResult = Field(default_factory=ClassificationResult.empty)
    file_name: str = ""
    error: Optional[str] = None
    loaded: bool = False


def initial_state() -> DashboardState:
    return DashboardState()


def load_default_workbook(
    config: AppConfig,
    previous: DashboardState | None = None,
) -> DashboardState:
    """Classify the configured default workbook.

    If the file cannot be read the file name is left unchanged.
    """
    path = Path(config.data.default_workbook)
    return _load(config, previous, path.name, path, keep_name_on_read_error=True)


def load_uploaded_workbook(
    config: AppConfig,
    file_name: str,
    data: bytes,
    previous: DashboardState | None = None,
) -> DashboardState:
    """Classify an uploaded workbook; its name becomes current immediately."""
    previous = previous or initial_state()
    if not is_supported_file(file_name):
        logger.warning("Rejected upload with unsupported extension: %s", file_name)
        return previous.model_copy(
            update={"file_name": file_name, "error": UNSUPPORTED_FILE_MESSAGE, "loaded": True}
        )
    return _load(config, previous, file_name, data, keep_name_on_read_error=False)


def _load(
    config: AppConfig,
    previous: DashboardState | None,
    file_name: str,
    source: WorkbookSource,
    keep_name_on_read_error: bool,
) -> DashboardState:
    previous = previous or initial_state()
    try:
        outcome = ClassifyStage(config).run(source_name=file_name, source=source)
    except WorkbookReadError:
        logger.exception("Could not read workbook %s", file_name)
        name = previous.file_name if keep_name_on_read_error else file_name
        return previous.model_copy(
            update={"file_name": name, "error": READ_ERROR_MESSAGE, "loaded": True}
        )
    except WorkbookDecodeError:
        logger.exception("Could not analyze workbook %s", file_name)
        return previous.model_copy(
            update={"file_name": file_name, "error": decode_error_message(config), "loaded": True}
        )

    return DashboardState(result=outcome.output, file_name=file_name, error=None, loaded=True)
