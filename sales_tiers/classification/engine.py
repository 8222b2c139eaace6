"""
Classification engine: aggregates raw sales records by practice, ranks the
practices by total sales and buckets them into tiers S/A/B/C.

Usage flow
----------
1. aggregate_records(records)
   -> list[AggregatedGroup]  (first-encounter order, keyless rows skipped)

2. rank_groups(groups)
   -> list[RankedEntry]  (total descending, ties keep first-encounter order)

3. compute_cutoffs(total_groups, fractions)
   -> TierCutoffs  (floor(total * fraction) for S, A, B)

4. assign_tier(index, cutoffs)
   -> Tier

``classify()`` runs all four steps.  It is a pure function: no I/O, no
shared state, and it never raises on a sequence of ``RawRecord``.  Empty
input yields four empty tiers.

Cutoffs are floored, not rounded.  With 10 practices the split is 1/2/3/4;
with 5 practices it is 0/1/2/2; a single practice always lands in tier C.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Context, Decimal

from sales_tiers.models.record import (
    AggregatedGroup,
    ClassificationResult,
    RankedEntry,
    RawRecord,
    TierCutoffs,
)
from sales_tiers.taxonomy.tier_taxonomy import DEFAULT_FRACTIONS, Tier

logger = logging.getLogger(__name__)

# Wide enough for any finite float quantized to a few decimal places.
_ROUNDING_CONTEXT = Context(prec=400)


def aggregate_records(records: Iterable[RawRecord]) -> list[AggregatedGroup]:
    """Sum ``amount`` per distinct ``group_key``.

    Records without a key are skipped.  A keyed record with a zero amount
    still creates its group.

    Returns:
        One ``AggregatedGroup`` per key, in order of first appearance.
    """
    totals: dict[str, float] = {}
    for record in records:
        if not record.group_key:
            continue
        totals[record.group_key] = totals.get(record.group_key, 0.0) + record.amount

    return [AggregatedGroup(key=key, total_amount=total) for key, total in totals.items()]


def round_amount(amount: float, places: int = 2) -> float:
    """Round half-up on the shortest decimal representation of ``amount``.

    ``round(2.675, 2)`` gives 2.67 because of binary representation; this
    gives 2.68, which is what a reader of the spreadsheet expects.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(
        Decimal(repr(amount)).quantize(quantum, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT)
    )


def rank_groups(groups: Iterable[AggregatedGroup]) -> list[RankedEntry]:
    """Sort groups by total descending and assign 1-based ranks.

    ``sorted`` is stable, so equal totals keep their input order.
    """
    ordered = sorted(groups, key=lambda g: -g.total_amount)
    return [
        RankedEntry(
            key=group.key,
            total_amount=group.total_amount,
            rank=position,
            rounded_amount=round_amount(group.total_amount),
        )
        for position, group in enumerate(ordered, start=1)
    ]


def compute_cutoffs(
    total_groups: int,
    fractions: tuple[float, float, float] = DEFAULT_FRACTIONS,
) -> TierCutoffs:
    """Return floored index cutoffs for ``total_groups`` practices.

    Args:
        total_groups: Number of distinct practices.
        fractions:    Cumulative (S, A, B) fractions, e.g. ``(0.1, 0.3, 0.6)``.
    """
    s_frac, a_frac, b_frac = fractions
    return TierCutoffs(
        total_groups=total_groups,
        s_cutoff=math.floor(total_groups * s_frac),
        a_cutoff=math.floor(total_groups * a_frac),
        b_cutoff=math.floor(total_groups * b_frac),
    )


def assign_tier(index: int, cutoffs: TierCutoffs) -> Tier:
    """Return the tier for the 0-based sorted position ``index``."""
    if index < cutoffs.s_cutoff:
        return Tier.S
    if index < cutoffs.a_cutoff:
        return Tier.A
    if index < cutoffs.b_cutoff:
        return Tier.B
    return Tier.C


def classify(
    records: Iterable[RawRecord],
    fractions: tuple[float, float, float] = DEFAULT_FRACTIONS,
) -> ClassificationResult:
    """Aggregate, rank and bucket ``records`` into tiers S/A/B/C.

    Args:
        records:   Validated input rows.
        fractions: Cumulative tier fractions (defaults to 10/30/60%).

    Returns:
        ``ClassificationResult`` whose four tiers partition every distinct
        keyed practice, each tier in rank order.
    """
    ranked = rank_groups(aggregate_records(records))
    cutoffs = compute_cutoffs(len(ranked), fractions)

    tiers: dict[Tier, list[RankedEntry]] = {tier: [] for tier in Tier}
    for index, entry in enumerate(ranked):
        tiers[assign_tier(index, cutoffs)].append(entry)

    logger.debug(
        "Classified %d practices | cutoffs s=%d a=%d b=%d",
        cutoffs.total_groups, cutoffs.s_cutoff, cutoffs.a_cutoff, cutoffs.b_cutoff,
    )
    return ClassificationResult(tiers=tiers, cutoffs=cutoffs)
