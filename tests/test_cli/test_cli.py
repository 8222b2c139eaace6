"""Tests for the sales-tiers CLI (typer CliRunner)."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sales_tiers.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path: Path, sample_workbook: Path) -> Path:
    path = tmp_path / "cli.toml"
    path.write_text(
        "[data]\n"
        f'default_workbook = "{sample_workbook.as_posix()}"\n'
        f'output_dir = "{(tmp_path / "outputs").as_posix()}"\n'
        "\n[logging]\n"
        'level = "WARNING"\n'
        'log_file = ""\n',
        encoding="utf-8",
    )
    return path


class TestClassify:
    def test_default_workbook(self, config_file):
        result = runner.invoke(app, ["classify", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "=== Sales Classification ===" in result.output
        assert "[CLASS B] 1 practice(s)" in result.output
        assert "North Clinic" in result.output
        assert "$1,500.25" in result.output

    def test_tier_filter(self, config_file):
        result = runner.invoke(app, ["classify", "--config", str(config_file), "-t", "c"])
        assert result.exit_code == 0, result.output
        assert "[CLASS C]" in result.output
        assert "[CLASS B]" not in result.output

    def test_unknown_tier(self, config_file):
        result = runner.invoke(app, ["classify", "--config", str(config_file), "-t", "Z"])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_json_output(self, config_file):
        result = runner.invoke(app, ["classify", "--config", str(config_file), "--json"])
        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["counts"] == {"S": 0, "A": 0, "B": 1, "C": 2}
        assert report["tiers"]["B"][0]["practice"] == "North Clinic"

    def test_write_reports(self, config_file, tmp_path):
        result = runner.invoke(
            app, ["classify", "--config", str(config_file), "--write-reports"]
        )
        assert result.exit_code == 0, result.output
        assert len(list((tmp_path / "outputs").iterdir())) == 2

    def test_missing_workbook(self, config_file, tmp_path):
        missing = tmp_path / "missing.xlsx"
        result = runner.invoke(app, ["classify", str(missing), "--config", str(config_file)])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_unsupported_extension(self, config_file, tmp_path):
        result = runner.invoke(
            app, ["classify", str(tmp_path / "sales.csv"), "--config", str(config_file)]
        )
        assert result.exit_code == 1
        assert "Unsupported file type" in result.output

    def test_missing_columns(self, config_file, write_workbook):
        path = write_workbook([{"Name": "A", "Sales": 1}], name="bad.xlsx")
        result = runner.invoke(app, ["classify", str(path), "--config", str(config_file)])
        assert result.exit_code == 1
        assert "missing required columns" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["classify", "--config", str(tmp_path / "none.toml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestExport:
    def test_csv(self, config_file, tmp_path):
        out = tmp_path / "tiers.csv"
        result = runner.invoke(
            app, ["export", "--config", str(config_file), "--out", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert "[OK] 3 practices exported" in result.output
        with out.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["practice"] for r in rows] == ["North Clinic", "South Clinic", "East Clinic"]
        assert [r["tier"] for r in rows] == ["B", "C", "C"]

    def test_json(self, config_file, tmp_path):
        out = tmp_path / "tiers.json"
        result = runner.invoke(
            app, ["export", "--config", str(config_file), "-f", "json", "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8"))["total_practices"] == 3

    def test_unknown_format(self, config_file, tmp_path):
        result = runner.invoke(
            app,
            ["export", "--config", str(config_file), "-f", "xml", "-o", str(tmp_path / "x")],
        )
        assert result.exit_code == 1
        assert "Unknown format" in result.output


class TestCriteriaAndConfig:
    def test_criteria(self, config_file):
        result = runner.invoke(app, ["criteria", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Class S: Top 10% of practices by sales volume" in result.output

    def test_validate_config(self, config_file):
        result = runner.invoke(app, ["validate-config", "--config", str(config_file), "--full"])
        assert result.exit_code == 0, result.output
        assert "[OK] Config valid." in result.output
        assert "Practice / Sales" in result.output

    def test_validate_config_rejects_bad_tiers(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[tiers]\ns_fraction = 0.9\n", encoding="utf-8")
        result = runner.invoke(app, ["validate-config", "--config", str(path)])
        assert result.exit_code == 1
        assert "Config validation failed" in result.output
