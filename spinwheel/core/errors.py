"""Error hierarchy shared by the spin-wheel subsystems.

Every failure of a flow transition is reported with one of the types below so
that the presentation layer can tell a user mistake (bad phone number, wrong
code) from an exhausted budget or a storage fault. None of them is fatal: the
orchestrator leaves its state intact and the caller may retry or close.
"""
from __future__ import annotations


class CoreError(Exception):
    """Base class for all custom exceptions in the package."""


class ConfigurationError(CoreError):
    """Raised when configuration files or the prize table are invalid."""


class FeatureDisabledError(CoreError):
    """Raised when the reward flow is opened while the offer is switched off."""


class InvalidIdentityError(CoreError):
    """Raised when a submitted identity does not match the expected format."""


class SpinsExhaustedError(CoreError):
    """Raised when the identity has no spins left for the current day."""


class VerificationFailedError(CoreError):
    """Raised when the verification provider rejects a submitted code."""

    def __init__(self, message: str, *, attempts_left: int | None = None) -> None:
        super().__init__(message)
        self.attempts_left = attempts_left


class SessionNotFoundError(CoreError):
    """Raised when a spin is recorded for an identity without a session today."""


class PersistenceError(CoreError):
    """Raised when the key-value backend cannot be read or written."""


class InvalidTransitionError(CoreError):
    """Raised when a flow action is not accepted in the current state."""


class SpinCancelledError(CoreError):
    """Raised by an in-flight spin when the flow is closed mid-animation."""


class TelemetryError(CoreError):
    """Raised for telemetry/logging persistence issues."""
