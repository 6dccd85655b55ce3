"""Utilities for dealing with timezones and calendar days.

Spin budgets reset per calendar day, so every component that compares session
dates goes through :func:`calendar_day` with the configured timezone instead of
formatting dates on its own.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from .types import CalendarDay

DEFAULT_TZ_NAME = "UTC"


def get_app_timezone(tz_name: str | None = None) -> ZoneInfo:
    """Return the ZoneInfo object for the configured timezone."""

    target_name = tz_name or DEFAULT_TZ_NAME
    return ZoneInfo(target_name)


def now_utc() -> datetime:
    """Return the current UTC datetime with tzinfo."""

    return datetime.now(timezone.utc)


def clock_for(tz_name: str | None = None) -> Callable[[], datetime]:
    """Return a ``now_fn`` bound to ``tz_name`` for injection into services."""

    tz = get_app_timezone(tz_name)
    return lambda: datetime.now(tz)


def calendar_day(dt: datetime, tz_name: str | None = None) -> CalendarDay:
    """Return the ISO calendar day (``YYYY-MM-DD``) of ``dt`` in ``tz_name``."""

    if dt.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware before conversion")
    return CalendarDay(dt.astimezone(get_app_timezone(tz_name)).date().isoformat())
