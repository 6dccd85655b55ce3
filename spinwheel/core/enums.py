"""Enumerations shared across the spin-wheel subsystems.

They live in the core package so that the orchestrator, telemetry and the
entry point can import them without introducing circular dependencies.
"""
from __future__ import annotations

from enum import Enum


class FlowState(str, Enum):
    """States of the reward flow driven by :class:`SpinOrchestrator`."""

    IDLE = "idle"
    AWAITING_IDENTITY = "awaiting_identity"
    AWAITING_VERIFICATION = "awaiting_verification"
    ELIGIBLE = "eligible"
    SPINNING = "spinning"
    SETTLED = "settled"
    EXHAUSTED = "exhausted"


class FlowEvent(str, Enum):
    """Telemetry event names emitted on flow transitions."""

    OPENED = "flow_opened"
    IDENTITY_ACCEPTED = "identity_accepted"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"
    SPIN_STARTED = "spin_started"
    SPIN_SETTLED = "spin_settled"
    EXHAUSTED = "spins_exhausted"
    CLOSED = "flow_closed"
