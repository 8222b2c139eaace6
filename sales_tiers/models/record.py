"""
Sales record and classification models.

Data flow::

    RawRecord  (one spreadsheet row, validated at the decode boundary)
        -> AggregatedGroup  (one per distinct practice, summed sales)
        -> RankedEntry      (aggregated group + 1-based rank + rounded amount)
        -> ClassificationResult  (tier -> ranked entries, rank order)

``RawRecord`` coerces loosely-typed spreadsheet cells so nothing untyped
reaches the engine:

  - ``group_key``: ``None``, NaN and ``""`` become ``None`` (row is excluded
    from aggregation).  Other scalars are stringified; integral floats such
    as ``101.0`` become ``"101"``.  Keys are NOT stripped.
  - ``amount``: numeric strings are parsed (``"50.5"`` -> ``50.5``); absent,
    NaN, infinite, boolean or unparseable values become ``0.0``.

All models are frozen — a classification run builds them once and never
mutates them.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from sales_tiers.taxonomy.tier_taxonomy import TIER_ORDER, Tier


class RawRecord(BaseModel):
    """One input row: an optional practice key and a sales amount.

    Attributes:
        group_key: Practice name, or ``None`` when the cell is absent/empty.
        amount: Sales amount; defaults to ``0.0``.
    """

    model_config = ConfigDict(frozen=True)

    group_key: Optional[str] = None
    amount: float = 0.0

    @field_validator("group_key", mode="before")
    @classmethod
    def coerce_group_key(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, float):
            if math.isnan(v):
                return None
            if v.is_integer():
                return str(int(v))
        v = str(v)
        return v if v else None

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        if v is None or isinstance(v, bool):
            return 0.0
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return 0.0
        try:
            out = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(out) or math.isinf(out):
            return 0.0
        return out

    @property
    def has_key(self) -> bool:
        return self.group_key is not None


class AggregatedGroup(BaseModel):
    """Total sales for one distinct practice."""

    model_config = ConfigDict(frozen=True)

    key: str
    total_amount: float


class RankedEntry(BaseModel):
    """An aggregated group with its 1-based rank and display amount.

    Attributes:
        key: Practice name.
        total_amount: Unrounded sum of sales for the practice.
        rank: 1 = highest total.
        rounded_amount: ``total_amount`` rounded half-up to 2 decimals.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    total_amount: float
    rank: int
    rounded_amount: float

    @field_validator("rank")
    @classmethod
    def validate_rank(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"rank must be >= 1, got {v}.")
        return v


class TierCutoffs(BaseModel):
    """Integer index boundaries between tiers for one run.

    Indices are 0-based positions in the descending sort:
    ``i < s_cutoff`` -> S, ``i < a_cutoff`` -> A, ``i < b_cutoff`` -> B,
    otherwise C.
    """

    model_config = ConfigDict(frozen=True)

    total_groups: int = 0
    s_cutoff: int = 0
    a_cutoff: int = 0
    b_cutoff: int = 0

    @model_validator(mode="after")
    def validate_ordering(self) -> "TierCutoffs":
        if not (0 <= self.s_cutoff <= self.a_cutoff <= self.b_cutoff <= self.total_groups):
            raise ValueError(
                "Cutoffs must satisfy 0 <= s_cutoff <= a_cutoff <= b_cutoff <= total_groups, "
                f"got s={self.s_cutoff}, a={self.a_cutoff}, b={self.b_cutoff}, "
                f"total={self.total_groups}."
            )
        return self


class ClassificationResult(BaseModel):
    """Ranked entries partitioned into the four tiers.

    ``tiers`` always holds all four tiers in S, A, B, C order; each list is
    in rank order.  Together the lists partition the full ranked list.
    """

    model_config = ConfigDict(frozen=True)

    tiers: dict[Tier, list[RankedEntry]]
    cutoffs: TierCutoffs = TierCutoffs()

    @field_validator("tiers")
    @classmethod
    def fill_missing_tiers(cls, v: dict[Tier, list[RankedEntry]]) -> dict[Tier, list[RankedEntry]]:
        return {tier: list(v.get(tier, [])) for tier in TIER_ORDER}

    @classmethod
    def empty(cls) -> "ClassificationResult":
        return cls(tiers={})

    @property
    def total_groups(self) -> int:
        return sum(len(entries) for entries in self.tiers.values())

    def counts(self) -> dict[Tier, int]:
        """Return the number of entries per tier, in tier order."""
        return {tier: len(self.tiers[tier]) for tier in TIER_ORDER}

    def entries(self) -> list[RankedEntry]:
        """Return every entry across all tiers in rank order."""
        return [entry for tier in TIER_ORDER for entry in self.tiers[tier]]

    def tier_of(self, key: str) -> Optional[Tier]:
        """Return the tier holding practice ``key``, or ``None``."""
        for tier in TIER_ORDER:
            if any(entry.key == key for entry in self.tiers[tier]):
                return tier
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready structure: ``{"S": [{practice, sales, rank}, ...], ...}``."""
        return {
            tier.value: [
                {
                    "practice": entry.key,
                    "sales": entry.rounded_amount,
                    "rank": entry.rank,
                }
                for entry in self.tiers[tier]
            ]
            for tier in TIER_ORDER
        }
