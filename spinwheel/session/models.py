"""Per-identity session records persisted by :class:`SessionStore`."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from spinwheel.core.types import Amount, CalendarDay, Identity, PrizeId


@dataclass(frozen=True, slots=True)
class WinRecord:
    """A settled spin. Never modified after being appended to a session."""

    timestamp: datetime
    prize_id: PrizeId
    amount: Amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "prize_id": self.prize_id,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WinRecord":
        return cls(
            timestamp=datetime.fromisoformat(payload["timestamp"]),
            prize_id=PrizeId(payload["prize_id"]),
            amount=Amount(int(payload["amount"])),
        )


@dataclass(slots=True)
class UserSession:
    """Spin usage of one identity on one calendar day.

    A new day never resets a record in place; it is represented by a fresh
    record with ``spins_used == 0`` that supersedes the old one.
    """

    identity: Identity
    date: CalendarDay
    spins_used: int = 0
    wins: List[WinRecord] = field(default_factory=list)

    def remaining(self, max_spins: int) -> int:
        return max(0, max_spins - self.spins_used)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "date": self.date,
            "spins_used": self.spins_used,
            "wins": [win.to_dict() for win in self.wins],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "UserSession":
        return cls(
            identity=Identity(payload["identity"]),
            date=CalendarDay(payload["date"]),
            spins_used=int(payload.get("spins_used", 0)),
            wins=[WinRecord.from_dict(item) for item in payload.get("wins", [])],
        )


__all__ = ["UserSession", "WinRecord"]
