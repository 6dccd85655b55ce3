"""Helpers for persisting telemetry artifacts (flow events, spin ledger, daily summary)."""
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List

from spinwheel.core.errors import TelemetryError
from spinwheel.telemetry.events import DailySpinSummary, SpinRecord, TelemetryEvent


def _day_stamp(day: str) -> str:
    return day.replace("-", "")


class TelemetryStorage:
    """Write structured telemetry objects to disk.

    The orchestrator pushes a :class:`TelemetryEvent` on every flow transition
    and a :class:`SpinRecord` for every settled spin; after each spin the
    :class:`DailySpinSummary` of the spin's calendar day is rebuilt from the
    ledger. Ledger and summary files are keyed by the calendar day the spin
    counts against, not by the wall-clock date of the write.
    """

    def __init__(self, *, logs_dir: Path, reports_dir: Path) -> None:
        self._logs_dir = logs_dir
        self._reports_dir = reports_dir
        for directory in (logs_dir, reports_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def ledger_path(self, day: str) -> Path:
        return self._reports_dir / f"spins_{_day_stamp(day)}.csv"

    def summary_path(self, day: str) -> Path:
        return self._reports_dir / f"summary_{_day_stamp(day)}.json"

    def append_event(self, event: TelemetryEvent) -> Path:
        """Append ``event`` as one JSON line to ``logs/events_YYYYMMDD.jsonl``."""

        path = self._logs_dir / f"events_{event.timestamp:%Y%m%d}.jsonl"
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
        try:
            with path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        except OSError as exc:  # pragma: no cover - filesystem errors are rare
            raise TelemetryError(f"Failed to write telemetry event: {exc}") from exc
        return path

    def append_spin(self, record: SpinRecord) -> Path:
        """Add ``record`` to the day's CSV ledger, writing the header on first use."""

        path = self.ledger_path(record.day)
        row = record.to_csv_row()
        is_new = not path.exists()
        try:
            with path.open("a", newline="", encoding="utf-8") as handle:
                writer = csv.DictWriter(handle, fieldnames=list(row))
                if is_new:
                    writer.writeheader()
                writer.writerow(row)
        except OSError as exc:  # pragma: no cover
            raise TelemetryError(f"Failed to write spin record: {exc}") from exc
        return path

    def read_spins(self, day: str) -> List[SpinRecord]:
        path = self.ledger_path(day)
        if not path.exists():
            return []
        try:
            with path.open(newline="", encoding="utf-8") as handle:
                return [SpinRecord.from_csv_row(row) for row in csv.DictReader(handle)]
        except (OSError, KeyError, ValueError) as exc:
            raise TelemetryError(f"Spin ledger {path.name} is unreadable: {exc}") from exc

    def write_daily_summary(self, day: str) -> DailySpinSummary:
        """Rebuild ``reports/summary_YYYYMMDD.json`` from the day's ledger."""

        summary = DailySpinSummary.from_spins(day, self.read_spins(day))
        path = self.summary_path(day)
        try:
            path.write_text(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:  # pragma: no cover
            raise TelemetryError(f"Failed to write daily summary: {exc}") from exc
        return summary


def default_storage(base_dir: Path) -> TelemetryStorage:
    """Factory returning storage rooted under ``base_dir``."""

    return TelemetryStorage(logs_dir=base_dir / "logs", reports_dir=base_dir / "reports")


__all__ = ["TelemetryStorage", "default_storage"]
