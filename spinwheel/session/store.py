"""Per-identity daily session store on top of a :class:`KeyValueStore`.

Records are keyed ``spin_session_<identity>``; only a record whose ``date``
equals the current calendar day counts. The store assumes a single writer per
identity at any instant and does not guard concurrent increments.
"""
from __future__ import annotations

import logging
from datetime import datetime

from spinwheel.core.errors import PersistenceError, SessionNotFoundError
from spinwheel.core.time_utils import now_utc
from spinwheel.core.types import Identity, mask_identity
from spinwheel.session.models import UserSession, WinRecord
from spinwheel.storage.base import KeyValueStore
from spinwheel.wheel.prize_table import PrizeEntry

KEY_PREFIX = "spin_session_"

LOGGER = logging.getLogger("spinwheel.session")


class SessionStore:
    """Load, create and update :class:`UserSession` records."""

    def __init__(self, backend: KeyValueStore) -> None:
        self._backend = backend

    @staticmethod
    def key_for(identity: str) -> str:
        return f"{KEY_PREFIX}{identity}"

    def load_session(self, identity: str, today: str) -> UserSession | None:
        """Return today's session for ``identity`` or ``None``.

        A record stored for an earlier day is treated as absent; it is left in
        place until the next write supersedes it.
        """

        payload = self._backend.get(self.key_for(identity))
        if payload is None:
            return None
        try:
            session = UserSession.from_dict(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed session record for {mask_identity(identity)}: {exc}") from exc
        if session.date != today:
            return None
        return session

    def ensure_session(self, identity: str, today: str) -> UserSession:
        session = self.load_session(identity, today)
        if session is not None:
            return session
        session = UserSession(identity=Identity(identity), date=today)
        self.save(session)
        LOGGER.info(
            "Session created",
            extra={"identity": mask_identity(identity), "date": today},
        )
        return session

    def record_spin(
        self,
        identity: str,
        today: str,
        prize: PrizeEntry,
        when: datetime | None = None,
    ) -> UserSession:
        session = self.load_session(identity, today)
        if session is None:
            raise SessionNotFoundError(
                f"No session for {mask_identity(identity)} on {today}; call ensure_session first"
            )
        session.spins_used += 1
        session.wins.append(
            WinRecord(timestamp=when or now_utc(), prize_id=prize.id, amount=prize.amount)
        )
        self.save(session)
        return session

    def save(self, session: UserSession) -> UserSession:
        self._backend.put(self.key_for(session.identity), session.to_dict())
        return session

    def purge_stale(self, today: str) -> int:
        """Delete records from days other than ``today``; return how many went.

        Unreadable records are skipped with a warning; they are reported again
        by :meth:`load_session` when their identity comes back.
        """

        removed = 0
        for key in self._backend.keys(KEY_PREFIX):
            try:
                payload = self._backend.get(key)
            except PersistenceError as exc:
                LOGGER.warning("Skipping unreadable session record: %s", exc, extra={"key": key})
                continue
            if payload is None or payload.get("date") == today:
                continue
            if self._backend.delete(key):
                removed += 1
        if removed:
            LOGGER.info("Purged stale sessions", extra={"removed": removed, "date": today})
        return removed


__all__ = ["KEY_PREFIX", "SessionStore"]
