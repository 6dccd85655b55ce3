"""Pluggable verification gate between identity entry and spinning.

The orchestrator only needs a yes/no answer for an identity and a submitted
code. :class:`StaticCodeVerifier` is the demo gate: one configured code for
everybody, announced in the log (and to an optional ``notify`` callback such
as the console) instead of being sent by SMS.
"""
from __future__ import annotations

import hmac
import logging
from typing import Callable, Protocol

from spinwheel.core.types import mask_identity

LOGGER = logging.getLogger("spinwheel.verification")


class VerificationProvider(Protocol):
    def request_code(self, identity: str) -> None:
        """Issue a code for ``identity`` (send an SMS, log it, ...)."""

    def verify(self, identity: str, code: str) -> bool:
        """Return ``True`` when ``code`` is valid for ``identity``."""


class StaticCodeVerifier:
    """Accept a single fixed code for every identity."""

    def __init__(self, code: str, notify: Callable[[str], None] | None = None) -> None:
        if not code:
            raise ValueError("Verification code must not be empty")
        self._code = code
        self._notify = notify

    def request_code(self, identity: str) -> None:
        LOGGER.info(
            "Verification code issued (demo: %s)",
            self._code,
            extra={"identity": mask_identity(identity)},
        )
        if self._notify is not None:
            self._notify(f"Your verification code is {self._code} (demo)")

    def verify(self, identity: str, code: str) -> bool:
        return hmac.compare_digest(code.strip().encode("utf-8"), self._code.encode("utf-8"))


__all__ = ["StaticCodeVerifier", "VerificationProvider"]
