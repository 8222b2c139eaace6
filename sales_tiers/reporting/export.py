"""
Export helpers for spreadsheet tools and manual analysis.

All functions write to disk and return the written ``Path``.

CSV exports are flat (one row per practice) so they load directly in
Excel, Power BI or pandas without any pre-processing step.

Output files (written by ClassifyStage)
---------------------------------------
  data/outputs/
    classification_{stem}_{date}.csv   -- one row per practice
    classification_{stem}_{date}.json  -- tier -> ranked entries
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path

from sales_tiers.models.record import ClassificationResult
from sales_tiers.taxonomy.tier_taxonomy import TIER_ORDER
from sales_tiers.utils.time_utils import today_utc, utcnow

logger = logging.getLogger(__name__)

EXPORT_FIELDNAMES: list[str] = ["tier", "rank", "practice", "sales", "total_amount"]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    cols = fieldnames or (list(records[0].keys()) if records else [])
    if not cols:
        path.write_text("", encoding="utf-8")
        return path
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file (parent dirs created)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def flatten_classification_for_export(result: ClassificationResult) -> list[dict]:
    """Flatten a classification into one row per practice, in rank order.

    Each row contains ``tier``, ``rank``, ``practice``, ``sales`` (rounded
    to cents) and ``total_amount`` (unrounded sum).
    """
    rows: list[dict] = []
    for tier in TIER_ORDER:
        for entry in result.tiers[tier]:
            rows.append(
                {
                    "tier":         tier.value,
                    "rank":         entry.rank,
                    "practice":     entry.key,
                    "sales":        entry.rounded_amount,
                    "total_amount": entry.total_amount,
                }
            )
    return rows


def build_classification_report(
    result:      ClassificationResult,
    source_name: str = "",
) -> dict:
    """Return the JSON report structure for ``result``.

    Shape::

        {"source": "...", "generated_at": "...", "total_practices": 10,
         "cutoffs": {...}, "counts": {"S": 1, ...}, "tiers": {"S": [...], ...}}
    """
    return {
        "source":          source_name,
        "generated_at":    utcnow().isoformat(),
        "total_practices": result.total_groups,
        "cutoffs":         result.cutoffs.model_dump(),
        "counts":          {tier.value: n for tier, n in result.counts().items()},
        "tiers":           result.to_dict(),
    }


def _report_path(output_dir: Path, source_name: str, run_date: date | None, ext: str) -> Path:
    stem = Path(source_name).stem.replace(" ", "_") if source_name else "workbook"
    return output_dir / f"classification_{stem}_{run_date or today_utc()}.{ext}"


def write_classification_csv(
    result:      ClassificationResult,
    output_dir:  Path,
    source_name: str = "",
    run_date:    date | None = None,
) -> Path:
    """Write the flat per-practice CSV report and return its path."""
    path = export_to_csv(
        flatten_classification_for_export(result),
        _report_path(output_dir, source_name, run_date, "csv"),
        fieldnames=EXPORT_FIELDNAMES,
    )
    logger.info("Classification CSV written: %s (%d rows)", path, result.total_groups)
    return path


def write_classification_json(
    result:      ClassificationResult,
    output_dir:  Path,
    source_name: str = "",
    run_date:    date | None = None,
) -> Path:
    """Write the structured JSON report and return its path."""
    path = export_to_json(
        build_classification_report(result, source_name),
        _report_path(output_dir, source_name, run_date, "json"),
    )
    logger.info("Classification JSON written: %s", path)
    return path
