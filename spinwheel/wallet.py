"""Running reward balance credited by the spin orchestrator."""
from __future__ import annotations

import logging

from spinwheel.core.errors import PersistenceError
from spinwheel.storage.base import KeyValueStore

BALANCE_KEY = "wallet_balance"

LOGGER = logging.getLogger("spinwheel.wallet")


class Wallet:
    """Device-wide integer balance stored under a single key.

    The balance only grows through :meth:`credit`; :meth:`reset` exists for
    external resets (e.g. after the balance was redeemed at checkout).
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self._backend = backend

    @property
    def balance(self) -> int:
        payload = self._backend.get(BALANCE_KEY)
        if payload is None:
            return 0
        try:
            return int(payload["balance"])
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed wallet record: {exc}") from exc

    def credit(self, amount: int) -> int:
        """Add ``amount`` to the balance and return the new balance."""

        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"Credit amount must be a positive integer, got {amount!r}")
        new_balance = self.balance + amount
        self._backend.put(BALANCE_KEY, {"balance": new_balance})
        LOGGER.info("Wallet credited", extra={"amount": amount, "balance": new_balance})
        return new_balance

    def reset(self) -> None:
        self._backend.put(BALANCE_KEY, {"balance": 0})
        LOGGER.info("Wallet reset")


__all__ = ["BALANCE_KEY", "Wallet"]
