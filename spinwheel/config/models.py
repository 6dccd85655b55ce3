"""Typed configuration models for the spin wheel.

The config subsystem relies on pydantic to validate the YAML file and to hand
strongly-typed objects to the rest of the runtime. Defaults reproduce the
storefront's shipped offer: three prizes, two spins per phone number per day,
a three second animation with 3-8 extra turns.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

ODDS_SUM_TOLERANCE = 1e-9


class PrizeConfig(BaseModel):
    """Single wheel segment: payout amount and probability of being drawn."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    amount: PositiveInt
    odds: float = Field(..., gt=0, le=1)
    color: str = Field("#fbbf24", description="Segment fill colour")
    emoji: str = ""

    model_config = ConfigDict(frozen=True)


class SpinConfig(BaseModel):
    """Spin budget and animation parameters."""

    max_spins_per_user: PositiveInt = 2
    spin_duration_ms: PositiveInt = 3000
    min_extra_rotations: int = Field(3, ge=0)
    max_extra_rotations: int = Field(8, ge=0)
    pointer_angle_deg: float = Field(
        270.0,
        ge=0,
        lt=360,
        description="Pointer position, degrees clockwise from 3 o'clock (270 = top)",
    )

    @model_validator(mode="after")
    def _check_rotation_range(self) -> "SpinConfig":
        if self.min_extra_rotations > self.max_extra_rotations:
            raise ValueError("min_extra_rotations must not exceed max_extra_rotations")
        return self


class IdentityConfig(BaseModel):
    """Expected identity format: fixed-length numeric phone number."""

    length: PositiveInt = 10


class VerificationConfig(BaseModel):
    """Placeholder OTP gate.

    ``max_attempts`` of ``None`` allows unlimited retries of the code.
    """

    code: str = Field("1234", min_length=1)
    max_attempts: Optional[PositiveInt] = None


class StorageConfig(BaseModel):
    """Location of the JSON key-value store."""

    data_dir: str = Field("data/store")


class TelemetryConfig(BaseModel):
    """Logging/reporting switches."""

    log_level: str = Field("INFO")
    logs_dir: str = Field("data/logs")
    reports_dir: str = Field("data/reports")
    log_backup_days: int = Field(14, ge=0)


class WheelConfig(BaseModel):
    """Top-level config combining the prize table and every runtime section."""

    feature_enabled: bool = True
    timezone: str = Field("UTC")
    prizes: List[PrizeConfig] = Field(..., min_length=1)
    spin: SpinConfig = Field(default_factory=SpinConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="after")
    def _check_prizes(self) -> "WheelConfig":
        ids = [prize.id for prize in self.prizes]
        duplicates = sorted({prize_id for prize_id in ids if ids.count(prize_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate prize ids: {', '.join(duplicates)}")
        total = sum(prize.odds for prize in self.prizes)
        if total > 1 + ODDS_SUM_TOLERANCE:
            raise ValueError(f"Prize odds sum to {total:.6f}, must not exceed 1")
        return self
