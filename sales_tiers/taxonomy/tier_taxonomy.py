"""
Tier taxonomy for practice sales classification.

Four tiers, best first:

  - ``S`` — top 10% of practices by total sales
  - ``A`` — next 20% (top 10-30%)
  - ``B`` — next 30% (top 30-60%)
  - ``C`` — remaining 40% (bottom 40%)

The percentages are *cumulative* cutoff fractions applied to the number of
distinct practices.  Cutoffs are floored, so for small practice counts the
actual bucket sizes drift from the advertised 10/20/30/40 split (with fewer
than 10 practices tier S is always empty).

This module has NO imports from any other ``sales_tiers`` package.
"""

from enum import StrEnum


class Tier(StrEnum):
    """Sales tier label, ordered best to worst."""

    S = "S"
    """Top 10% of practices by sales volume."""

    A = "A"
    """Next 20% (top 10-30%)."""

    B = "B"
    """Next 30% (top 30-60%)."""

    C = "C"
    """Remaining 40% (bottom 40%)."""


TIER_ORDER: tuple[Tier, ...] = (Tier.S, Tier.A, Tier.B, Tier.C)

# Cumulative fractions for the S, A and B upper bounds; C takes the rest.
DEFAULT_FRACTIONS: tuple[float, float, float] = (0.10, 0.30, 0.60)

TIER_DESCRIPTIONS: dict[Tier, str] = {
    Tier.S: "Top 10% of practices by sales volume",
    Tier.A: "Next 20% (Top 10-30%)",
    Tier.B: "Next 30% (Top 30-60%)",
    Tier.C: "Remaining 40% (Bottom 40%)",
}


def describe_fractions(fractions: tuple[float, float, float]) -> dict[Tier, str]:
    """Return criteria descriptions for arbitrary cumulative ``fractions``.

    Falls back to the canonical wording when ``fractions`` equals
    ``DEFAULT_FRACTIONS``.
    """
    if tuple(fractions) == DEFAULT_FRACTIONS:
        return dict(TIER_DESCRIPTIONS)

    s, a, b = (round(f * 100) for f in fractions)
    return {
        Tier.S: f"Top {s}% of practices by sales volume",
        Tier.A: f"Next {a - s}% (Top {s}-{a}%)",
        Tier.B: f"Next {b - a}% (Top {a}-{b}%)",
        Tier.C: f"Remaining {100 - b}% (Bottom {100 - b}%)",
    }
