"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``SALES_TIERS_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI, the pipeline stage and the dashboard all receive an ``AppConfig``
instance — never raw dicts or env var lookups scattered through the code.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from sales_tiers.taxonomy.tier_taxonomy import DEFAULT_FRACTIONS

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Filesystem paths for input workbooks and written reports."""

    model_config = ConfigDict(frozen=True)

    default_workbook: str = "data/samples/sales_by_practice.xlsx"
    output_dir: str = "data/outputs"


class ColumnsConfig(BaseModel):
    """Header names of the columns read from the first sheet."""

    model_config = ConfigDict(frozen=True)

    group_column: str = "Practice"
    amount_column: str = "Sales"

    @field_validator("group_column", "amount_column")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Column names must not be blank.")
        return v


class TierConfig(BaseModel):
    """Cumulative cutoff fractions for tiers S, A and B (C takes the rest)."""

    model_config = ConfigDict(frozen=True)

    s_fraction: float = DEFAULT_FRACTIONS[0]
    a_fraction: float = DEFAULT_FRACTIONS[1]
    b_fraction: float = DEFAULT_FRACTIONS[2]

    @model_validator(mode="after")
    def validate_ordering(self) -> "TierConfig":
        if not (0.0 <= self.s_fraction <= self.a_fraction <= self.b_fraction <= 1.0):
            raise ValueError(
                "Tier fractions must satisfy 0 <= s_fraction <= a_fraction <= b_fraction <= 1, "
                f"got {self.s_fraction}, {self.a_fraction}, {self.b_fraction}."
            )
        return self

    @property
    def fractions(self) -> tuple[float, float, float]:
        return (self.s_fraction, self.a_fraction, self.b_fraction)


class DisplayConfig(BaseModel):
    """Presentation settings for CLI tables and dashboard cards."""

    model_config = ConfigDict(frozen=True)

    currency_symbol: str = "$"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/sales_tiers.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    columns: ColumnsConfig = ColumnsConfig()
    tiers: TierConfig = TierConfig()
    display: DisplayConfig = DisplayConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply SALES_TIERS_* env vars to the raw config dict.

    Supported overrides:
      SALES_TIERS_DEFAULT_WORKBOOK → raw["data"]["default_workbook"]
      SALES_TIERS_LOG_LEVEL        → raw["logging"]["level"]
      SALES_TIERS_DEBUG            → raw["debug"]
    """
    if workbook := os.environ.get("SALES_TIERS_DEFAULT_WORKBOOK"):
        raw.setdefault("data", {})["default_workbook"] = workbook

    if log_level := os.environ.get("SALES_TIERS_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("SALES_TIERS_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        columns=ColumnsConfig(**raw.get("columns", {})),
        tiers=TierConfig(**raw.get("tiers", {})),
        display=DisplayConfig(**raw.get("display", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
