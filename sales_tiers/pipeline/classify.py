"""
ClassifyStage — decode a workbook, classify its practices, optionally write reports.

Steps:
  1. Decode the first sheet with the configured column names.
  2. Run ``classify()`` with the configured tier fractions.
  3. If ``output_dir`` is given, write the CSV and JSON reports there.

``run.rows_processed`` counts decoded rows; ``run.groups_classified``
counts distinct practices placed into tiers.
"""

from __future__ import annotations

from pathlib import Path

from sales_tiers.classification.engine import classify
from sales_tiers.ingestion.workbook import WorkbookSource, read_workbook
from sales_tiers.models.meta import RunMetadata
from sales_tiers.models.record import ClassificationResult
from sales_tiers.pipeline.base import PipelineStage
from sales_tiers.reporting.export import write_classification_csv, write_classification_json


class ClassifyStage(PipelineStage[ClassificationResult]):
    """Workbook in, ``ClassificationResult`` out."""

    stage_name = "classify"

    def _execute(
        self,
        run: RunMetadata,
        source: WorkbookSource,
        output_dir: Path | None = None,
        **kwargs,
    ) -> ClassificationResult:
        columns = self.config.columns
        records = read_workbook(
            source,
            group_column=columns.group_column,
            amount_column=columns.amount_column,
        )
        run.rows_processed = len(records)

        result = classify(records, fractions=self.config.tiers.fractions)
        run.groups_classified = result.total_groups

        if output_dir is not None:
            source_name = run.source_name or ""
            write_classification_csv(result, output_dir, source_name)
            write_classification_json(result, output_dir, source_name)

        return result
