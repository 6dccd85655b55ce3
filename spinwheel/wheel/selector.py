"""Probability-weighted prize selection.

Inverse-CDF draw over the prize table: cumulative sums of ``odds`` in table
order form the boundaries, and the first boundary that is greater than or
equal to the uniform draw wins. Long-run frequencies match the configured odds
regardless of table order; order only decides ties.

When the odds sum to less than 1 the remainder of ``[0, 1)`` reaches no
boundary. Those draws return the first entry of the table so that every draw
has a defined, testable outcome.
"""
from __future__ import annotations

from typing import List

from spinwheel.wheel.prize_table import PrizeEntry, PrizeTable


def cumulative_boundaries(table: PrizeTable) -> List[float]:
    """Return the cumulative odds boundary of every entry, in table order."""

    boundaries: List[float] = []
    running = 0.0
    for entry in table:
        running += entry.odds
        boundaries.append(running)
    return boundaries


def select_prize(table: PrizeTable, draw: float) -> PrizeEntry:
    """Map a uniform ``draw`` in ``[0, 1)`` to a prize of ``table``."""

    if not 0.0 <= draw < 1.0:
        raise ValueError(f"draw must be in [0, 1), got {draw!r}")
    for entry, boundary in zip(table, cumulative_boundaries(table)):
        if draw <= boundary:
            return entry
    return table[0]


__all__ = ["cumulative_boundaries", "select_prize"]
