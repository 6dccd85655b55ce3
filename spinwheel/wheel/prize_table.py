"""Datamodels describing wheel prizes.

A :class:`PrizeTable` is built once from the validated ``prizes`` section of
the config and never changes for the lifetime of the process. Table order is
significant: it fixes the tie-break order of the selector and the position of
each segment on the wheel.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from spinwheel.config.models import ODDS_SUM_TOLERANCE, PrizeConfig
from spinwheel.core.errors import ConfigurationError
from spinwheel.core.types import Amount, PrizeId


@dataclass(frozen=True, slots=True)
class PrizeEntry:
    """One wheel segment: payout, draw probability and display hints."""

    id: PrizeId
    name: str
    amount: Amount
    odds: float
    color: str = "#fbbf24"
    emoji: str = ""

    @classmethod
    def from_config(cls, config: PrizeConfig) -> "PrizeEntry":
        return cls(
            id=PrizeId(config.id),
            name=config.name,
            amount=Amount(config.amount),
            odds=config.odds,
            color=config.color,
            emoji=config.emoji,
        )


@dataclass(frozen=True, slots=True)
class PrizeTable:
    """Ordered, immutable collection of :class:`PrizeEntry` objects."""

    entries: tuple[PrizeEntry, ...]

    def __post_init__(self) -> None:
        if not self.entries:
            raise ConfigurationError("Prize table must contain at least one prize")
        seen: set[str] = set()
        for entry in self.entries:
            if entry.id in seen:
                raise ConfigurationError(f"Duplicate prize id: {entry.id}")
            seen.add(entry.id)
            if entry.amount <= 0:
                raise ConfigurationError(f"Prize {entry.id} must have a positive amount")
            if not 0 < entry.odds <= 1:
                raise ConfigurationError(f"Prize {entry.id} odds must be in (0, 1], got {entry.odds}")
        total = self.total_odds
        if total > 1 + ODDS_SUM_TOLERANCE:
            raise ConfigurationError(f"Prize odds sum to {total:.6f}, must not exceed 1")

    @classmethod
    def from_entries(cls, entries: Iterable[PrizeEntry]) -> "PrizeTable":
        return cls(entries=tuple(entries))

    @classmethod
    def from_config(cls, prizes: Sequence[PrizeConfig]) -> "PrizeTable":
        return cls(entries=tuple(PrizeEntry.from_config(prize) for prize in prizes))

    @property
    def total_odds(self) -> float:
        return sum(entry.odds for entry in self.entries)

    def index_of(self, prize_id: str) -> int:
        """Return the position of ``prize_id`` in table order."""

        for index, entry in enumerate(self.entries):
            if entry.id == prize_id:
                return index
        raise KeyError(f"Unknown prize id: {prize_id}")

    def get(self, prize_id: str) -> PrizeEntry:
        return self.entries[self.index_of(prize_id)]

    def __iter__(self) -> Iterator[PrizeEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> PrizeEntry:
        return self.entries[index]


__all__ = ["PrizeEntry", "PrizeTable"]
