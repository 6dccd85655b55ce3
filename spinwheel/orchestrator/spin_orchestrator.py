"""Reward-flow state machine tying eligibility, prize draw and settlement.

``SpinOrchestrator`` drives one flow for one identity:

    IDLE -> AWAITING_IDENTITY -> AWAITING_VERIFICATION -> ELIGIBLE
         -> SPINNING -> SETTLED -> ELIGIBLE ... -> EXHAUSTED

It never touches persisted data directly: sessions go through
:class:`SessionStore`, money through :class:`Wallet`. Persisted state changes
only when a spin settles, and the session record and the wallet credit are
applied together or not at all. If a failed credit cannot be undone either,
the recorded spin is kept and the next ``settle()`` only retries the credit,
so a spin is never counted twice. A failed transition leaves the current state
untouched unless noted otherwise, so the caller can retry or close the flow.
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable

from spinwheel.config.models import WheelConfig
from spinwheel.core.enums import FlowEvent, FlowState
from spinwheel.core.errors import (
    FeatureDisabledError,
    InvalidIdentityError,
    InvalidTransitionError,
    PersistenceError,
    SessionNotFoundError,
    SpinCancelledError,
    SpinsExhaustedError,
    TelemetryError,
    VerificationFailedError,
)
from spinwheel.core.time_utils import calendar_day, clock_for
from spinwheel.core.types import CalendarDay, Identity, mask_identity
from spinwheel.orchestrator.models import PendingSpin, PresentationSink, SpinOutcome, SpinTicket
from spinwheel.session.models import UserSession
from spinwheel.session.store import SessionStore
from spinwheel.telemetry.events import SpinRecord, TelemetryEvent
from spinwheel.telemetry.storage import TelemetryStorage
from spinwheel.verification import VerificationProvider
from spinwheel.wallet import Wallet
from spinwheel.wheel.prize_table import PrizeTable
from spinwheel.wheel.rotation import final_rotation, map_prize_to_rotation
from spinwheel.wheel.selector import select_prize


class SpinOrchestrator:
    """Single-flow, single-threaded state machine for the spin wheel."""

    def __init__(
        self,
        config: WheelConfig,
        prize_table: PrizeTable,
        sessions: SessionStore,
        wallet: Wallet,
        verifier: VerificationProvider,
        *,
        rng: random.Random | None = None,
        now_fn: Callable[[], datetime] | None = None,
        telemetry: TelemetryStorage | None = None,
    ) -> None:
        self._config = config
        self._table = prize_table
        self._sessions = sessions
        self._wallet = wallet
        self._verifier = verifier
        self._rng = rng or random.SystemRandom()
        self._now = now_fn or clock_for(config.timezone)
        self._telemetry = telemetry
        self.logger = logging.getLogger("spinwheel.orchestrator")

        self._state = FlowState.IDLE
        self._identity: Identity | None = None
        self._failed_attempts = 0
        self._pending: PendingSpin | None = None
        self._animation: asyncio.Future[Any] | None = None
        self._last_outcome: SpinOutcome | None = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------
    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def last_outcome(self) -> SpinOutcome | None:
        return self._last_outcome

    @property
    def spins_remaining(self) -> int | None:
        """Today's spin budget for the current identity, ``None`` before identity entry."""

        if self._identity is None:
            return None
        max_spins = self._config.spin.max_spins_per_user
        session = self._sessions.load_session(self._identity, self._today())
        if session is None:
            return max_spins
        return session.remaining(max_spins)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def open(self) -> FlowState:
        """Start the reward flow and wait for an identity."""

        if not self._config.feature_enabled:
            raise FeatureDisabledError("Spin wheel is currently disabled")
        if self._state is not FlowState.IDLE:
            self.close()
        self._last_outcome = None
        self._set_state(FlowState.AWAITING_IDENTITY)
        self._emit(FlowEvent.OPENED)
        return self._state

    def submit_identity(self, raw_identity: str) -> FlowState:
        """Validate the phone number and ask the provider for a code."""

        self._require("submit an identity", FlowState.AWAITING_IDENTITY)
        candidate = (raw_identity or "").strip()
        length = self._config.identity.length
        if len(candidate) != length or not (candidate.isascii() and candidate.isdigit()):
            raise InvalidIdentityError(f"Please enter a valid {length}-digit phone number")

        identity = Identity(candidate)
        session = self._sessions.load_session(identity, self._today())
        if session is not None and session.remaining(self._config.spin.max_spins_per_user) <= 0:
            self._identity = identity
            self._exhaust(session)
            raise SpinsExhaustedError("You have already used all your spins for today")

        self._verifier.request_code(identity)
        self._identity = identity
        self._failed_attempts = 0
        self._set_state(FlowState.AWAITING_VERIFICATION)
        self._emit(FlowEvent.IDENTITY_ACCEPTED)
        return self._state

    def submit_verification(self, code: str) -> int:
        """Check ``code``; on success open today's session and return the spin budget."""

        self._require("verify a code", FlowState.AWAITING_VERIFICATION)
        identity = self._current_identity()
        if not self._verifier.verify(identity, code):
            self._failed_attempts += 1
            attempts_left = self._attempts_left()
            self._emit(
                FlowEvent.VERIFICATION_FAILED,
                level="WARNING",
                failed_attempts=self._failed_attempts,
                attempts_left=attempts_left,
            )
            if attempts_left == 0:
                self._identity = None
                self._failed_attempts = 0
                self._set_state(FlowState.AWAITING_IDENTITY)
            raise VerificationFailedError("Invalid verification code", attempts_left=attempts_left)

        session = self._sessions.ensure_session(identity, self._today())
        remaining = session.remaining(self._config.spin.max_spins_per_user)
        self._failed_attempts = 0
        if remaining <= 0:
            self._exhaust(session)
            raise SpinsExhaustedError("You have already used all your spins for today")
        self._set_state(FlowState.ELIGIBLE)
        self._emit(FlowEvent.VERIFIED, spins_remaining=remaining)
        return remaining

    def begin_spin(self) -> SpinTicket:
        """Draw the prize and return the rotation the wheel has to land on."""

        if self._state is FlowState.EXHAUSTED:
            raise SpinsExhaustedError("You have exhausted your spins for today")
        self._require("spin", FlowState.ELIGIBLE)
        identity = self._current_identity()
        spin_cfg = self._config.spin
        today = self._today()

        session = self._sessions.ensure_session(identity, today)
        if session.remaining(spin_cfg.max_spins_per_user) <= 0:
            self._exhaust(session)
            raise SpinsExhaustedError("You have exhausted your spins for today")

        draw = self._rng.random()
        prize = select_prize(self._table, draw)
        base = map_prize_to_rotation(self._table, prize, spin_cfg.pointer_angle_deg)
        extra = self._rng.randint(spin_cfg.min_extra_rotations, spin_cfg.max_extra_rotations)
        ticket = SpinTicket(
            target_rotation_deg=final_rotation(base, extra),
            duration_ms=spin_cfg.spin_duration_ms,
            base_rotation_deg=base,
            extra_rotations=extra,
        )
        self._pending = PendingSpin(prize=prize, draw=draw, day=today, ticket=ticket)
        self._set_state(FlowState.SPINNING)
        self.logger.info(
            "Spin started",
            extra={
                "identity": mask_identity(identity),
                "draw": round(draw, 6),
                "target_rotation_deg": ticket.target_rotation_deg,
            },
        )
        self._emit(FlowEvent.SPIN_STARTED, target_rotation_deg=ticket.target_rotation_deg)
        return ticket

    def settle(self) -> SpinOutcome:
        """Record the pending win and credit the wallet (animation finished)."""

        self._require("settle a spin", FlowState.SPINNING)
        identity = self._current_identity()
        pending = self._pending
        if pending is None:  # pragma: no cover - guarded by the state check
            raise InvalidTransitionError("No spin is pending")

        before: UserSession | None = None
        session = pending.recorded
        if session is None:
            before = self._sessions.load_session(identity, pending.day)
            if before is None:
                raise SessionNotFoundError(f"No session for {mask_identity(identity)} on {pending.day}")
            session = self._sessions.record_spin(identity, pending.day, pending.prize, when=self._now())
        try:
            balance = self._wallet.credit(pending.prize.amount)
        except Exception:
            if before is not None and not self._rollback_session(before):
                # The spin stays written; the next settle() only retries the credit.
                self._pending = replace(pending, recorded=session)
            raise

        remaining = session.remaining(self._config.spin.max_spins_per_user)
        outcome = SpinOutcome(
            prize=pending.prize,
            win=session.wins[-1],
            wallet_balance=balance,
            spins_used=session.spins_used,
            spins_remaining=remaining,
            target_rotation_deg=pending.ticket.target_rotation_deg,
        )
        self._pending = None
        self._last_outcome = outcome
        self._set_state(FlowState.SETTLED)
        self.logger.info(
            "Spin settled",
            extra={
                "identity": mask_identity(identity),
                "prize_id": pending.prize.id,
                "amount": pending.prize.amount,
                "spins_remaining": remaining,
            },
        )
        self._emit(FlowEvent.SPIN_SETTLED, prize_id=pending.prize.id, amount=pending.prize.amount)
        self._log_spin(identity, pending, outcome)

        if remaining > 0:
            self._set_state(FlowState.ELIGIBLE)
        else:
            self._exhaust(session)
        return outcome

    async def spin(self, presentation: PresentationSink) -> SpinOutcome:
        """Run a full spin: draw, await the animation, settle.

        ``close()`` during the animation cancels it and raises
        :class:`SpinCancelledError`; nothing is persisted in that case. If the
        caller is cancelled or ``animate`` fails, the drawn prize is discarded,
        the flow returns to ``ELIGIBLE`` and the error propagates.
        """

        ticket = self.begin_spin()
        pending = self._pending
        animation = asyncio.ensure_future(presentation.animate(ticket.target_rotation_deg, ticket.duration_ms))
        self._animation = animation
        try:
            await animation
        except asyncio.CancelledError:
            if self._pending is pending and self._state is FlowState.SPINNING:
                self._pending = None
                self._set_state(FlowState.ELIGIBLE)
                raise
            raise SpinCancelledError("Spin cancelled before settlement") from None
        except Exception:
            if self._pending is pending and self._state is FlowState.SPINNING:
                self._pending = None
                self._set_state(FlowState.ELIGIBLE)
                self.logger.warning("Spin animation failed; prize discarded", exc_info=True)
            raise
        finally:
            if self._animation is animation:
                self._animation = None
        if self._pending is not pending:
            raise SpinCancelledError("Spin cancelled before settlement")
        return self.settle()

    def close(self) -> None:
        """Discard the in-memory flow; persisted sessions and wallet stay as they are."""

        animation = self._animation
        self._animation = None
        self._identity = None
        self._failed_attempts = 0
        self._pending = None
        self._last_outcome = None
        if self._state is not FlowState.IDLE:
            self._set_state(FlowState.IDLE)
            self._emit(FlowEvent.CLOSED)
        if animation is not None and not animation.done():
            animation.cancel()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _today(self) -> CalendarDay:
        return calendar_day(self._now(), self._config.timezone)

    def _current_identity(self) -> Identity:
        if self._identity is None:  # pragma: no cover - guarded by the state check
            raise InvalidTransitionError("No identity has been submitted")
        return self._identity

    def _attempts_left(self) -> int | None:
        max_attempts = self._config.verification.max_attempts
        if max_attempts is None:
            return None
        return max(0, max_attempts - self._failed_attempts)

    def _require(self, action: str, *allowed: FlowState) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(f"Cannot {action} while {self._state.value}")

    def _set_state(self, new_state: FlowState) -> None:
        if new_state is self._state:
            return
        self.logger.debug(
            "Flow transition",
            extra={"from_state": self._state.value, "to_state": new_state.value},
        )
        self._state = new_state

    def _exhaust(self, session: UserSession) -> None:
        self._set_state(FlowState.EXHAUSTED)
        self._emit(FlowEvent.EXHAUSTED, spins_used=session.spins_used)

    def _rollback_session(self, before: UserSession) -> bool:
        try:
            self._sessions.save(before)
        except PersistenceError:
            self.logger.exception(
                "Failed to restore session after wallet credit failure",
                extra={"identity": mask_identity(before.identity)},
            )
            return False
        return True

    def _emit(self, event: FlowEvent, *, level: str = "INFO", **payload: Any) -> None:
        if self._telemetry is None:
            return
        context = {"state": self._state.value}
        if self._identity is not None:
            context["identity"] = mask_identity(self._identity)
        try:
            self._telemetry.append_event(
                TelemetryEvent(
                    timestamp=self._now(),
                    event_type=event.value,
                    level=level,
                    payload=payload,
                    context=context,
                )
            )
        except TelemetryError as exc:
            self.logger.warning("Failed to log flow event: %s", exc)

    def _log_spin(self, identity: Identity, pending: PendingSpin, outcome: SpinOutcome) -> None:
        if self._telemetry is None:
            return
        record = SpinRecord(
            settled_at=outcome.win.timestamp,
            identity=mask_identity(identity),
            day=pending.day,
            prize_id=pending.prize.id,
            prize_name=pending.prize.name,
            amount=pending.prize.amount,
            draw=pending.draw,
            target_rotation_deg=pending.ticket.target_rotation_deg,
            spins_used=outcome.spins_used,
            spins_remaining=outcome.spins_remaining,
            wallet_balance=outcome.wallet_balance,
        )
        try:
            self._telemetry.append_spin(record)
            self._telemetry.write_daily_summary(pending.day)
        except TelemetryError as exc:
            self.logger.warning("Failed to write spin record: %s", exc)


__all__ = ["SpinOrchestrator"]
