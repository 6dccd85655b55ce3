"""Map a chosen prize to the wheel rotation that lands on it.

Angles are degrees measured clockwise from the 3 o'clock axis, which is how a
canvas draws arcs, and the wheel turns clockwise. Every prize occupies an
equal segment in table order; the pointer sits at a fixed angle (270 degrees,
the top of the wheel, by default).

The prize is always drawn first. The rotation is derived from it and never
the other way round.
"""
from __future__ import annotations

import math

from spinwheel.core.types import Degrees
from spinwheel.wheel.prize_table import PrizeEntry, PrizeTable

FULL_TURN_DEG = 360.0
POINTER_TOP_DEG = 270.0


def segment_angle(table: PrizeTable) -> float:
    """Angular width of one segment."""

    return FULL_TURN_DEG / len(table)


def segment_midpoint(table: PrizeTable, prize: PrizeEntry) -> Degrees:
    """Angle of the middle of ``prize``'s segment on the unrotated wheel."""

    width = segment_angle(table)
    index = table.index_of(prize.id)
    return Degrees(index * width + width / 2)


def map_prize_to_rotation(
    table: PrizeTable,
    prize: PrizeEntry,
    pointer_angle_deg: float = POINTER_TOP_DEG,
) -> Degrees:
    """Base rotation in ``[0, 360)`` that puts ``prize``'s midpoint under the pointer."""

    midpoint = segment_midpoint(table, prize)
    return Degrees((pointer_angle_deg - midpoint) % FULL_TURN_DEG)


def final_rotation(base_rotation_deg: float, extra_rotations: int) -> Degrees:
    """Total rotation handed to the animation: whole extra turns plus the base angle."""

    if extra_rotations < 0:
        raise ValueError("extra_rotations must be non-negative")
    return Degrees(extra_rotations * FULL_TURN_DEG + base_rotation_deg)


def prize_at_pointer(
    table: PrizeTable,
    rotation_deg: float,
    pointer_angle_deg: float = POINTER_TOP_DEG,
) -> PrizeEntry:
    """Return the prize whose segment sits under the pointer after ``rotation_deg``."""

    wheel_angle = (pointer_angle_deg - rotation_deg) % FULL_TURN_DEG
    index = math.floor(wheel_angle / segment_angle(table))
    return table[min(index, len(table) - 1)]


__all__ = [
    "FULL_TURN_DEG",
    "POINTER_TOP_DEG",
    "final_rotation",
    "map_prize_to_rotation",
    "prize_at_pointer",
    "segment_angle",
    "segment_midpoint",
]
