"""Datamodels exchanged between the orchestrator and its collaborators.

:class:`SpinTicket` is what the presentation layer receives when a spin
starts; :class:`SpinOutcome` is what the caller gets once the spin settled and
the win was recorded and credited.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from spinwheel.core.types import CalendarDay, Degrees
from spinwheel.session.models import UserSession, WinRecord
from spinwheel.wheel.prize_table import PrizeEntry


@dataclass(frozen=True, slots=True)
class SpinTicket:
    """Animation instructions for one spin."""

    target_rotation_deg: Degrees
    duration_ms: int
    base_rotation_deg: Degrees
    extra_rotations: int


@dataclass(frozen=True, slots=True)
class SpinOutcome:
    """Result of a settled spin."""

    prize: PrizeEntry
    win: WinRecord
    wallet_balance: int
    spins_used: int
    spins_remaining: int
    target_rotation_deg: Degrees


@dataclass(frozen=True, slots=True)
class PendingSpin:
    """Prize drawn by ``begin_spin`` and waiting for the animation to finish.

    ``recorded`` holds the persisted session once the spin was written but the
    wallet credit failed and the session could not be restored; settling again
    then only retries the credit.
    """

    prize: PrizeEntry
    draw: float
    day: CalendarDay
    ticket: SpinTicket
    recorded: UserSession | None = None


class PresentationSink(Protocol):
    """Animates the wheel; returning from ``animate`` signals completion."""

    async def animate(self, target_rotation_deg: float, duration_ms: int) -> None:
        ...


__all__ = ["PendingSpin", "PresentationSink", "SpinOutcome", "SpinTicket"]
