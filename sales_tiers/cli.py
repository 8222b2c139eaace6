"""
Sales Tiers — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (classify a workbook, export a report, etc.).
  5. Report result to stdout.

Install and run::

    pip install -e .
    sales-tiers --help
    sales-tiers classify                       # uses config.data.default_workbook
    sales-tiers classify sales.xlsx --tier S --tier A
    sales-tiers export sales.xlsx --format csv --out tiers.csv
    sales-tiers criteria
    sales-tiers validate-config
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="sales-tiers",
    help="Rank practices by total sales and bucket them into S/A/B/C tiers.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from sales_tiers.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from sales_tiers.utils.logging import configure_logging
    configure_logging(config.logging)


def _classify_or_exit(config, workbook: Optional[str], output_dir: Optional[Path] = None):
    """Run ClassifyStage on ``workbook`` (or the default), exiting 1 on failure."""
    from sales_tiers.ingestion.workbook import WorkbookError, is_supported_file
    from sales_tiers.pipeline.classify import ClassifyStage

    path = Path(workbook) if workbook else Path(config.data.default_workbook)
    if not is_supported_file(path.name):
        typer.echo(f"[ERROR] Unsupported file type: {path.name} (expected .xlsx or .xls)", err=True)
        raise typer.Exit(code=1)

    try:
        outcome = ClassifyStage(config).run(
            source_name=path.name, source=path, output_dir=output_dir
        )
    except WorkbookError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    return path, outcome


def _parse_tiers(tiers: Optional[list[str]]):
    from sales_tiers.taxonomy.tier_taxonomy import Tier

    if not tiers:
        return None
    try:
        return [Tier(t.upper()) for t in tiers]
    except ValueError:
        typer.echo(f"[ERROR] Unknown tier in {tiers}. Valid tiers: S, A, B, C.", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("classify")
def classify_cmd(
    workbook: Optional[str] = typer.Argument(
        None,
        help="Path to an .xlsx/.xls workbook. Defaults to config.data.default_workbook.",
    ),
    tier: Optional[list[str]] = typer.Option(
        None,
        "--tier",
        "-t",
        help="Only show these tiers (repeatable, e.g. -t S -t A).",
    ),
    write_reports: bool = typer.Option(
        False,
        "--write-reports",
        help="Also write CSV and JSON reports (to config.data.output_dir by default).",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Write CSV and JSON reports into this directory (implies --write-reports).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the classification as JSON instead of tables.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Classify the practices in a workbook and print them by tier."""
    from sales_tiers.reporting.export import build_classification_report
    from sales_tiers.reporting.formatters import format_tier_summary, format_tier_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    selected = _parse_tiers(tier)
    out_dir: Optional[Path] = None
    if output_dir:
        out_dir = Path(output_dir)
    elif write_reports:
        out_dir = Path(config.data.output_dir)
    path, outcome = _classify_or_exit(config, workbook, out_dir)
    result = outcome.output

    if as_json:
        typer.echo(json.dumps(build_classification_report(result, path.name), indent=2))
        return

    typer.echo(format_tier_summary(result, source_name=path.name))
    typer.echo(format_tier_table(result, selected, config.display.currency_symbol))
    if out_dir is not None:
        typer.echo("")
        typer.echo(f"Reports written to: {out_dir}")


@app.command("export")
def export_cmd(
    workbook: Optional[str] = typer.Argument(
        None,
        help="Path to an .xlsx/.xls workbook. Defaults to config.data.default_workbook.",
    ),
    fmt: str = typer.Option(
        "csv",
        "--format",
        "-f",
        help="Output format: csv or json.",
    ),
    out: str = typer.Option(
        ...,
        "--out",
        "-o",
        help="Destination file path.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Classify a workbook and export the result as flat CSV or JSON."""
    from sales_tiers.reporting.export import (
        EXPORT_FIELDNAMES,
        build_classification_report,
        export_to_csv,
        export_to_json,
        flatten_classification_for_export,
    )

    fmt = fmt.lower()
    if fmt not in ("csv", "json"):
        typer.echo(f"[ERROR] Unknown format '{fmt}'. Use csv or json.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path, outcome = _classify_or_exit(config, workbook)
    result = outcome.output

    if fmt == "csv":
        written = export_to_csv(
            flatten_classification_for_export(result), Path(out), fieldnames=EXPORT_FIELDNAMES
        )
    else:
        written = export_to_json(build_classification_report(result, path.name), Path(out))

    typer.echo(f"[OK] {result.total_groups} practices exported to {written}")


@app.command("criteria")
def criteria_cmd(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print the tier classification criteria."""
    from sales_tiers.reporting.formatters import format_criteria

    config = _load_config_or_exit(config_path)
    typer.echo(format_criteria(config.tiers.fractions))


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Default workbook: {config.data.default_workbook}")
    typer.echo(f"  Output dir:       {config.data.output_dir}")
    typer.echo(f"  Columns:          {config.columns.group_column} / {config.columns.amount_column}")
    typer.echo(f"  Tier fractions:   {', '.join(str(f) for f in config.tiers.fractions)}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
