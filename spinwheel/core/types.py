"""Shared type aliases for readability and contract enforcement.

Identities, prize ids, amounts and angles are all plain primitives at runtime;
the aliases keep them from being mixed up across subsystems.
"""
from __future__ import annotations

from typing import Any, Mapping, NewType, TypeAlias

Identity = NewType("Identity", str)
PrizeId = NewType("PrizeId", str)
Amount = NewType("Amount", int)
Degrees = NewType("Degrees", float)
CalendarDay = NewType("CalendarDay", str)

JSONLike: TypeAlias = Mapping[str, Any]


def mask_identity(identity: str) -> str:
    """Return ``identity`` with everything but the last four characters hidden."""

    if len(identity) <= 4:
        return "*" * len(identity)
    return "*" * (len(identity) - 4) + identity[-4:]
