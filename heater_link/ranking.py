"""Score tier classification.

A rank table is an ordered sequence of ``(inclusive_upper_bound, label)``
pairs, tightest bound first.  The last tier must be unbounded
(``math.inf``) so every score, including ``NaN``, resolves to a label.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

RankTable = Tuple[Tuple[float, str], ...]

DEFAULT_RANKS: RankTable = (
    (13.0, "Control Master"),
    (16.0, "Control Student"),
    (20.0, "Learner"),
    (math.inf, "Crash Test Dummy"),
)

# Labels shown by the original lab application.
CLASSIC_RANKS: RankTable = (
    (13.0, "Control Master"),
    (16.0, "Control Student"),
    (20.0, "Proud owner of a learners permit"),
    (50.0, "Accident waiting to happen"),
    (math.inf, "Professional crash test dummy"),
)

RANK_TABLES = {"default": DEFAULT_RANKS, "classic": CLASSIC_RANKS}


def validate_rank_table(table: Sequence[Tuple[float, str]]) -> RankTable:
    """Return *table* as a tuple, raising ``ValueError`` if it is unusable."""
    if not table:
        raise ValueError("rank table must not be empty")
    bounds = [bound for bound, _ in table]
    if any(math.isnan(b) for b in bounds):
        raise ValueError("rank bounds must not be NaN")
    if any(a >= b for a, b in zip(bounds, bounds[1:])):
        raise ValueError("rank bounds must be strictly ascending")
    if bounds[-1] != math.inf:
        raise ValueError("last rank tier must be unbounded (math.inf)")
    return tuple((float(bound), label) for bound, label in table)


def rank(score: float, table: RankTable = DEFAULT_RANKS) -> str:
    """Classify *score* into a tier label.

    Bounds are inclusive, so a score equal to a bound gets the more
    favourable tier.  ``NaN`` compares false everywhere and lands in the
    last tier.
    """
    for bound, label in table:
        if score <= bound:
            return label
    return table[-1][1]
