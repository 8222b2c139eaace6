"""Tests for the pipeline stage base class and ClassifyStage."""

from __future__ import annotations

import logging
import re

import pytest

from sales_tiers.config import AppConfig, ColumnsConfig, LoggingConfig, TierConfig
from sales_tiers.ingestion.workbook import WorkbookDecodeError, WorkbookReadError
from sales_tiers.models.meta import RunMetadata
from sales_tiers.pipeline.base import PipelineStage
from sales_tiers.pipeline.classify import ClassifyStage
from sales_tiers.taxonomy.tier_taxonomy import Tier


class TestPipelineStageABC:
    def test_cannot_instantiate_base_directly(self):
        with pytest.raises(TypeError):
            PipelineStage(config=None)  # type: ignore

    def test_concrete_subclass_without_execute_raises(self):
        class IncompleteStage(PipelineStage):
            stage_name = "classify"

        with pytest.raises(TypeError):
            IncompleteStage(config=None)  # type: ignore

    def test_failure_is_reraised(self, quiet_config):
        class BoomStage(PipelineStage[int]):
            stage_name = "classify"

            def _execute(self, run: RunMetadata, **kwargs) -> int:
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            BoomStage(quiet_config).run()

    def test_success_outcome(self, quiet_config):
        class CountStage(PipelineStage[int]):
            stage_name = "classify"

            def _execute(self, run: RunMetadata, **kwargs) -> int:
                run.rows_processed = 3
                return 42

        outcome = CountStage(quiet_config).run(source_name="x.xlsx")
        assert outcome.output == 42
        assert outcome.run.status == "success"
        assert outcome.run.source_name == "x.xlsx"
        assert outcome.run.rows_processed == 3
        assert outcome.run.finished_at is not None

    def test_completion_log_includes_duration(self, quiet_config, caplog):
        class QuickStage(PipelineStage[int]):
            stage_name = "classify"

            def _execute(self, run: RunMetadata, **kwargs) -> int:
                return 0

        with caplog.at_level(logging.INFO, logger="sales_tiers.pipeline.base"):
            outcome = QuickStage(quiet_config).run()

        assert outcome.run.duration_seconds is not None
        assert outcome.run.duration_seconds >= 0
        completed = [r.getMessage() for r in caplog.records if "completed" in r.getMessage()]
        assert len(completed) == 1
        assert re.search(r"\| \d+\.\d{3}s \|", completed[0])


class TestClassifyStage:
    def test_stage_name(self):
        assert ClassifyStage.stage_name == "classify"

    def test_classifies_workbook(self, quiet_config, sample_workbook):
        outcome = ClassifyStage(quiet_config).run(
            source_name=sample_workbook.name, source=sample_workbook
        )
        result = outcome.output
        # 3 practices -> cutoffs 0/0/1: North in B, South and East in C.
        assert [e.key for e in result.tiers[Tier.B]] == ["North Clinic"]
        assert [e.key for e in result.tiers[Tier.C]] == ["South Clinic", "East Clinic"]
        assert result.tiers[Tier.B][0].rounded_amount == 1500.25

    def test_run_counts(self, quiet_config, sample_workbook):
        run = ClassifyStage(quiet_config).run(source=sample_workbook).run
        assert run.rows_processed == 5
        assert run.groups_classified == 3
        assert run.status == "success"

    def test_accepts_bytes(self, quiet_config, sample_workbook):
        outcome = ClassifyStage(quiet_config).run(source=sample_workbook.read_bytes())
        assert outcome.output.total_groups == 3

    def test_uses_configured_columns_and_fractions(self, tmp_path, write_workbook):
        path = write_workbook([{"Clinic": f"C{i}", "Revenue": 10 - i} for i in range(4)])
        config = AppConfig(
            columns=ColumnsConfig(group_column="Clinic", amount_column="Revenue"),
            tiers=TierConfig(s_fraction=0.5, a_fraction=0.5, b_fraction=1.0),
            logging=LoggingConfig(log_file=""),
        )
        result = ClassifyStage(config).run(source=path).output
        assert result.counts() == {Tier.S: 2, Tier.A: 0, Tier.B: 2, Tier.C: 0}

    def test_writes_reports_when_output_dir_given(self, quiet_config, sample_workbook, tmp_path):
        out_dir = tmp_path / "reports"
        ClassifyStage(quiet_config).run(
            source_name="sample.xlsx", source=sample_workbook, output_dir=out_dir
        )
        written = sorted(p.suffix for p in out_dir.iterdir())
        assert written == [".csv", ".json"]
        assert all(p.name.startswith("classification_sample_") for p in out_dir.iterdir())

    def test_no_reports_by_default(self, quiet_config, sample_workbook, tmp_path):
        ClassifyStage(quiet_config).run(source=sample_workbook)
        assert not (tmp_path / "outputs").exists()

    def test_decode_error_propagates(self, quiet_config):
        with pytest.raises(WorkbookDecodeError):
            ClassifyStage(quiet_config).run(source=b"garbage")

    def test_read_error_propagates(self, quiet_config, tmp_path):
        with pytest.raises(WorkbookReadError):
            ClassifyStage(quiet_config).run(source=tmp_path / "missing.xlsx")
