"""Structured telemetry models (flow events and settled spins)."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Sequence


@dataclass(slots=True)
class TelemetryEvent:
    """Generic event used by JSON-line logs under ``logs/events_YYYYMMDD.jsonl``."""

    timestamp: datetime
    event_type: str
    level: str = "INFO"
    payload: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass(slots=True)
class SpinRecord:
    """Settled-spin ledger entry persisted to ``reports/spins_YYYYMMDD.csv``."""

    settled_at: datetime
    identity: str
    day: str
    prize_id: str
    prize_name: str
    amount: int
    draw: float
    target_rotation_deg: float
    spins_used: int
    spins_remaining: int
    wallet_balance: int

    def to_csv_row(self) -> Dict[str, Any]:
        return {
            "datetime_settled": self.settled_at.isoformat(),
            "identity": self.identity,
            "day": self.day,
            "prize_id": self.prize_id,
            "prize_name": self.prize_name,
            "amount": self.amount,
            "draw": f"{self.draw:.6f}",
            "target_rotation_deg": round(self.target_rotation_deg, 3),
            "spins_used": self.spins_used,
            "spins_remaining": self.spins_remaining,
            "wallet_balance": self.wallet_balance,
        }

    @classmethod
    def from_csv_row(cls, row: Dict[str, str]) -> "SpinRecord":
        return cls(
            settled_at=datetime.fromisoformat(row["datetime_settled"]),
            identity=row["identity"],
            day=row["day"],
            prize_id=row["prize_id"],
            prize_name=row["prize_name"],
            amount=int(row["amount"]),
            draw=float(row["draw"]),
            target_rotation_deg=float(row["target_rotation_deg"]),
            spins_used=int(row["spins_used"]),
            spins_remaining=int(row["spins_remaining"]),
            wallet_balance=int(row["wallet_balance"]),
        )


@dataclass(slots=True)
class DailySpinSummary:
    """Aggregated spin ledger for one calendar day (``reports/summary_YYYYMMDD.json``)."""

    day: str
    spins_count: int
    unique_identities: int
    total_awarded: int
    per_prize_count: Dict[str, int] = field(default_factory=dict)
    per_prize_amount: Dict[str, int] = field(default_factory=dict)
    last_settled_at: datetime | None = None

    @classmethod
    def from_spins(cls, day: str, spins: Sequence[SpinRecord]) -> "DailySpinSummary":
        per_prize_count: Dict[str, int] = {}
        per_prize_amount: Dict[str, int] = {}
        for spin in spins:
            per_prize_count[spin.prize_id] = per_prize_count.get(spin.prize_id, 0) + 1
            per_prize_amount[spin.prize_id] = per_prize_amount.get(spin.prize_id, 0) + spin.amount
        return cls(
            day=day,
            spins_count=len(spins),
            unique_identities=len({spin.identity for spin in spins}),
            total_awarded=sum(spin.amount for spin in spins),
            per_prize_count=per_prize_count,
            per_prize_amount=per_prize_amount,
            last_settled_at=max((spin.settled_at for spin in spins), default=None),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["last_settled_at"] = self.last_settled_at.isoformat() if self.last_settled_at else None
        return data


__all__ = ["DailySpinSummary", "SpinRecord", "TelemetryEvent"]
