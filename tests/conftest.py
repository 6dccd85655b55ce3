from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

import pytest

from spinwheel.config.models import PrizeConfig, WheelConfig
from spinwheel.core.errors import PersistenceError
from spinwheel.orchestrator import SpinOrchestrator
from spinwheel.session.store import SessionStore
from spinwheel.storage.base import MemoryStore
from spinwheel.wallet import Wallet
from spinwheel.wheel.prize_table import PrizeTable


@pytest.fixture(scope="session")
def prize_configs() -> list[PrizeConfig]:
    return [
        PrizeConfig(id="prize_a", name="Prize A", amount=100, odds=1 / 30, color="#fbbf24", emoji="A"),
        PrizeConfig(id="prize_b", name="Prize B", amount=300, odds=1 / 100, color="#60a5fa", emoji="B"),
        PrizeConfig(id="prize_c", name="Prize C", amount=500, odds=1 / 300, color="#34d399", emoji="C"),
    ]


@pytest.fixture(scope="session")
def prize_table(prize_configs) -> PrizeTable:
    return PrizeTable.from_config(prize_configs)


@pytest.fixture
def wheel_config_factory(prize_configs) -> Callable[..., WheelConfig]:
    def _factory(**overrides: object) -> WheelConfig:
        payload: dict[str, object] = {
            "feature_enabled": True,
            "timezone": "UTC",
            "prizes": [prize.model_dump() for prize in prize_configs],
            "spin": {"max_spins_per_user": 2, "spin_duration_ms": 3000},
        }
        payload.update(overrides)
        return WheelConfig.model_validate(payload)

    return _factory


@pytest.fixture
def wheel_config(wheel_config_factory) -> WheelConfig:
    return wheel_config_factory()


class FixedClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current = self.current + timedelta(**delta)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))


class ScriptedRandom:
    """Random source returning queued draws; ``randint`` returns the lower bound."""

    def __init__(self, draws: Iterable[float] = ()) -> None:
        self.draws = list(draws)
        self.randint_calls: list[tuple[int, int]] = []

    def queue(self, *draws: float) -> None:
        self.draws.extend(draws)

    def random(self) -> float:
        if not self.draws:
            raise AssertionError("ScriptedRandom ran out of draws")
        return self.draws.pop(0)

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        return a


@pytest.fixture
def scripted_random() -> ScriptedRandom:
    return ScriptedRandom()


class FakeVerifier:
    def __init__(self, code: str = "1234") -> None:
        self.code = code
        self.requested: list[str] = []

    def request_code(self, identity: str) -> None:
        self.requested.append(identity)

    def verify(self, identity: str, code: str) -> bool:
        return code == self.code


@pytest.fixture
def fake_verifier() -> FakeVerifier:
    return FakeVerifier()


class FakePresentation:
    """Records animation requests; blocks until released when ``hold`` is set."""

    def __init__(self, hold: bool = False) -> None:
        self.calls: list[tuple[float, int]] = []
        self.hold = hold
        self.started: asyncio.Event | None = None
        self.release: asyncio.Event | None = None

    async def animate(self, target_rotation_deg: float, duration_ms: int) -> None:
        self.calls.append((target_rotation_deg, duration_ms))
        if not self.hold:
            return
        if self.started is None or self.release is None:
            self.started = asyncio.Event()
            self.release = asyncio.Event()
        self.started.set()
        await self.release.wait()


@pytest.fixture
def fake_presentation() -> FakePresentation:
    return FakePresentation()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session_store(memory_store) -> SessionStore:
    return SessionStore(memory_store)


@pytest.fixture
def wallet(memory_store) -> Wallet:
    return Wallet(memory_store)


class FlakyWallet(Wallet):
    """Wallet whose next ``failures`` credits raise :class:`PersistenceError`."""

    def __init__(self, backend, failures: int = 1) -> None:
        super().__init__(backend)
        self.failures = failures

    def credit(self, amount: int) -> int:
        if self.failures > 0:
            self.failures -= 1
            raise PersistenceError("disk full")
        return super().credit(amount)


@pytest.fixture
def flaky_wallet(memory_store) -> FlakyWallet:
    return FlakyWallet(memory_store)


@pytest.fixture
def orchestrator_factory(
    wheel_config,
    prize_table,
    session_store,
    wallet,
    fake_verifier,
    scripted_random,
    clock,
) -> Callable[..., SpinOrchestrator]:
    def _factory(**overrides: object) -> SpinOrchestrator:
        kwargs: dict[str, object] = {
            "config": wheel_config,
            "prize_table": prize_table,
            "sessions": session_store,
            "wallet": wallet,
            "verifier": fake_verifier,
            "rng": scripted_random,
            "now_fn": clock,
        }
        kwargs.update(overrides)
        return SpinOrchestrator(**kwargs)  # type: ignore[arg-type]

    return _factory
