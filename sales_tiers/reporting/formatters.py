"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept a ``ClassificationResult`` (or plain values) and
return plain multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Currency
--------
``format_currency()`` renders amounts the way an en-US currency formatter
does: thousands separators, exactly two decimals, and the sign before the
symbol::

  1234.5   -> $1,234.50
  -12      -> -$12.00
"""

from __future__ import annotations

from sales_tiers.models.record import ClassificationResult
from sales_tiers.taxonomy.tier_taxonomy import (
    DEFAULT_FRACTIONS,
    TIER_ORDER,
    Tier,
    describe_fractions,
)

_PRACTICE_WIDTH = 40


def format_currency(amount: float, symbol: str = "$") -> str:
    """Format ``amount`` as en-US currency with two decimals."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


# ── Criteria ──────────────────────────────────────────────────────────────────


def format_criteria(fractions: tuple[float, float, float] = DEFAULT_FRACTIONS) -> str:
    """Return the classification criteria block, one line per tier."""
    descriptions = describe_fractions(fractions)
    lines = ["Classification Criteria:"]
    for tier in TIER_ORDER:
        lines.append(f"  Class {tier.value}: {descriptions[tier]}")
    return "\n".join(lines)


# ── Summary ───────────────────────────────────────────────────────────────────


def format_tier_summary(result: ClassificationResult, source_name: str = "") -> str:
    """Return per-tier practice counts plus the cutoffs that produced them.

    Example::

        === Sales Classification ===
          Current file: sales.xlsx
          Practices:    10   (cutoffs S<1  A<3  B<6)

          Class S       1 practices
          Class A       2 practices
    """
    cutoffs = result.cutoffs
    lines: list[str] = []
    lines.append("")
    lines.append("=== Sales Classification ===")
    if source_name:
        lines.append(f"  Current file: {source_name}")
    lines.append(
        f"  Practices:    {result.total_groups}   "
        f"(cutoffs S<{cutoffs.s_cutoff}  A<{cutoffs.a_cutoff}  B<{cutoffs.b_cutoff})"
    )
    lines.append("")
    for tier, count in result.counts().items():
        lines.append(f"  Class {tier.value}  {count:>6} practices")
    return "\n".join(lines)


# ── Tier tables ───────────────────────────────────────────────────────────────


def format_tier_table(
    result:          ClassificationResult,
    tiers:           list[Tier] | None = None,
    currency_symbol: str = "$",
) -> str:
    """Format ranked practices as one ASCII block per tier.

    Args:
        result:          Classification to render.
        tiers:           Subset of tiers to show (default: all four, S first).
        currency_symbol: Symbol used by ``format_currency``.

    Returns:
        Multi-line string.  Empty tiers show a ``(no practices)`` line.
    """
    selected = [t for t in TIER_ORDER if tiers is None or t in tiers]
    lines: list[str] = []

    for tier in selected:
        entries = result.tiers[tier]
        lines.append("")
        lines.append(f"  [CLASS {tier.value}] {len(entries)} practice(s)")
        if not entries:
            lines.append("    (no practices)")
            continue

        header = f"    {'Rank':>5}  {'Practice':<{_PRACTICE_WIDTH}}  {'Sales':>16}"
        lines.append(header)
        lines.append("    " + "-" * (len(header) - 4))
        for entry in entries:
            practice = entry.key[:_PRACTICE_WIDTH]
            sales = format_currency(entry.rounded_amount, currency_symbol)
            lines.append(
                f"    {'#' + str(entry.rank):>5}  {practice:<{_PRACTICE_WIDTH}}  {sales:>16}"
            )

    return "\n".join(lines)
