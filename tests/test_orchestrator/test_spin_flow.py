from __future__ import annotations

import pytest

from spinwheel.core.enums import FlowState
from spinwheel.core.errors import (
    FeatureDisabledError,
    InvalidIdentityError,
    InvalidTransitionError,
    SpinsExhaustedError,
    VerificationFailedError,
)
from spinwheel.wheel.prize_table import PrizeEntry, PrizeTable
from spinwheel.wheel.rotation import prize_at_pointer

PHONE = "9999999999"


def _verified(orchestrator_factory, **overrides):
    orchestrator = orchestrator_factory(**overrides)
    orchestrator.open()
    orchestrator.submit_identity(PHONE)
    orchestrator.submit_verification("1234")
    return orchestrator


def test_open_should_fail_when_feature_disabled(orchestrator_factory, wheel_config_factory) -> None:
    orchestrator = orchestrator_factory(config=wheel_config_factory(feature_enabled=False))
    with pytest.raises(FeatureDisabledError):
        orchestrator.open()
    assert orchestrator.state is FlowState.IDLE


def test_submit_identity_should_reject_bad_format(orchestrator_factory, fake_verifier) -> None:
    orchestrator = orchestrator_factory()
    orchestrator.open()
    for raw in ("12345", "99999999999", "99999x9999", "", "９９９９９９９９９９"):
        with pytest.raises(InvalidIdentityError):
            orchestrator.submit_identity(raw)
        assert orchestrator.state is FlowState.AWAITING_IDENTITY
    assert fake_verifier.requested == []


def test_submit_identity_should_strip_whitespace_and_request_code(orchestrator_factory, fake_verifier) -> None:
    orchestrator = orchestrator_factory()
    orchestrator.open()
    assert orchestrator.submit_identity(f"  {PHONE}\n") is FlowState.AWAITING_VERIFICATION
    assert orchestrator.identity == PHONE
    assert fake_verifier.requested == [PHONE]
    assert orchestrator.spins_remaining == 2


def test_submit_identity_should_respect_configured_length(orchestrator_factory, wheel_config_factory) -> None:
    orchestrator = orchestrator_factory(config=wheel_config_factory(identity={"length": 8}))
    orchestrator.open()
    with pytest.raises(InvalidIdentityError):
        orchestrator.submit_identity(PHONE)
    assert orchestrator.submit_identity("12345678") is FlowState.AWAITING_VERIFICATION


def test_failed_verification_should_allow_retry(orchestrator_factory, session_store, clock) -> None:
    orchestrator = orchestrator_factory()
    orchestrator.open()
    orchestrator.submit_identity(PHONE)
    for _ in range(3):
        with pytest.raises(VerificationFailedError) as excinfo:
            orchestrator.submit_verification("0000")
        assert excinfo.value.attempts_left is None
        assert orchestrator.state is FlowState.AWAITING_VERIFICATION
    assert session_store.load_session(PHONE, "2024-01-01") is None

    assert orchestrator.submit_verification("1234") == 2
    assert orchestrator.state is FlowState.ELIGIBLE
    assert session_store.load_session(PHONE, "2024-01-01") is not None


def test_verification_attempt_limit_should_return_to_identity_entry(
    orchestrator_factory, wheel_config_factory
) -> None:
    orchestrator = orchestrator_factory(config=wheel_config_factory(verification={"max_attempts": 2}))
    orchestrator.open()
    orchestrator.submit_identity(PHONE)

    with pytest.raises(VerificationFailedError) as first:
        orchestrator.submit_verification("0000")
    assert first.value.attempts_left == 1
    assert orchestrator.state is FlowState.AWAITING_VERIFICATION

    with pytest.raises(VerificationFailedError) as second:
        orchestrator.submit_verification("0000")
    assert second.value.attempts_left == 0
    assert orchestrator.state is FlowState.AWAITING_IDENTITY
    assert orchestrator.identity is None


def test_two_spins_then_exhausted(orchestrator_factory, scripted_random, wallet) -> None:
    orchestrator = _verified(orchestrator_factory)
    assert wallet.balance == 0

    scripted_random.queue(0.04)
    orchestrator.begin_spin()
    assert orchestrator.state is FlowState.SPINNING
    first = orchestrator.settle()
    assert first.prize.id == "prize_b"
    assert first.wallet_balance == 300
    assert first.spins_remaining == 1
    assert wallet.balance == 300
    assert orchestrator.state is FlowState.ELIGIBLE

    scripted_random.queue(0.02)
    orchestrator.begin_spin()
    second = orchestrator.settle()
    assert second.prize.id == "prize_a"
    assert wallet.balance == 400
    assert second.spins_used == 2
    assert second.spins_remaining == 0
    assert orchestrator.state is FlowState.EXHAUSTED
    assert orchestrator.last_outcome == second

    with pytest.raises(SpinsExhaustedError):
        orchestrator.begin_spin()
    assert wallet.balance == 400


def test_exhausted_identity_should_be_stopped_before_verification(
    orchestrator_factory, session_store, prize_table, fake_verifier
) -> None:
    session_store.ensure_session(PHONE, "2024-01-01")
    session_store.record_spin(PHONE, "2024-01-01", prize_table[0])
    session_store.record_spin(PHONE, "2024-01-01", prize_table[0])

    orchestrator = orchestrator_factory()
    orchestrator.open()
    with pytest.raises(SpinsExhaustedError):
        orchestrator.submit_identity(PHONE)
    assert orchestrator.state is FlowState.EXHAUSTED
    assert orchestrator.spins_remaining == 0
    assert fake_verifier.requested == []


def test_exhausted_session_should_reject_regardless_of_table_and_wallet(
    orchestrator_factory, session_store, wallet, scripted_random
) -> None:
    jackpot_only = PrizeTable.from_entries(
        [PrizeEntry(id="jackpot", name="Jackpot", amount=1_000, odds=1.0)]
    )
    wallet.credit(10_000)
    orchestrator = _verified(orchestrator_factory, prize_table=jackpot_only)
    for _ in range(2):
        scripted_random.queue(0.5)
        orchestrator.begin_spin()
        assert orchestrator.settle().prize.id == "jackpot"
    with pytest.raises(SpinsExhaustedError):
        orchestrator.begin_spin()
    assert session_store.load_session(PHONE, "2024-01-01").spins_used == 2


def test_new_day_should_restore_budget(orchestrator_factory, scripted_random, clock) -> None:
    orchestrator = _verified(orchestrator_factory)
    for draw in (0.02, 0.02):
        scripted_random.queue(draw)
        orchestrator.begin_spin()
        orchestrator.settle()
    assert orchestrator.state is FlowState.EXHAUSTED

    clock.advance(days=1)
    orchestrator.open()
    orchestrator.submit_identity(PHONE)
    assert orchestrator.submit_verification("1234") == 2
    assert orchestrator.spins_remaining == 2


def test_begin_spin_should_target_the_drawn_prize(orchestrator_factory, scripted_random, prize_table) -> None:
    orchestrator = _verified(orchestrator_factory)
    scripted_random.queue(0.045)
    ticket = orchestrator.begin_spin()
    assert scripted_random.randint_calls == [(3, 8)]
    assert ticket.extra_rotations == 3
    assert ticket.duration_ms == 3000
    assert ticket.target_rotation_deg == pytest.approx(3 * 360 + ticket.base_rotation_deg)
    assert prize_at_pointer(prize_table, ticket.target_rotation_deg).id == "prize_c"
    assert orchestrator.settle().prize.id == "prize_c"


def test_settle_should_record_win_with_clock_timestamp(
    orchestrator_factory, scripted_random, session_store, clock
) -> None:
    orchestrator = _verified(orchestrator_factory)
    scripted_random.queue(0.02)
    orchestrator.begin_spin()
    clock.advance(seconds=3)
    outcome = orchestrator.settle()
    assert outcome.win.timestamp == clock.current
    stored = session_store.load_session(PHONE, "2024-01-01")
    assert stored.wins == [outcome.win]


def test_spin_started_before_midnight_should_settle_on_start_day(
    orchestrator_factory, scripted_random, session_store, clock
) -> None:
    clock.current = clock.current.replace(hour=23, minute=59, second=59)
    orchestrator = _verified(orchestrator_factory)
    scripted_random.queue(0.02)
    orchestrator.begin_spin()
    clock.advance(seconds=3)
    outcome = orchestrator.settle()
    assert outcome.spins_used == 1
    assert session_store.load_session(PHONE, "2024-01-01").spins_used == 1


def test_transitions_out_of_order_should_raise(orchestrator_factory) -> None:
    orchestrator = orchestrator_factory()
    with pytest.raises(InvalidTransitionError):
        orchestrator.submit_identity(PHONE)
    with pytest.raises(InvalidTransitionError):
        orchestrator.begin_spin()
    with pytest.raises(InvalidTransitionError):
        orchestrator.settle()
    assert orchestrator.state is FlowState.IDLE

    orchestrator.open()
    with pytest.raises(InvalidTransitionError):
        orchestrator.submit_verification("1234")
    assert orchestrator.state is FlowState.AWAITING_IDENTITY


def test_close_should_discard_flow_without_touching_storage(
    orchestrator_factory, scripted_random, session_store, wallet
) -> None:
    orchestrator = _verified(orchestrator_factory)
    scripted_random.queue(0.02)
    orchestrator.begin_spin()
    orchestrator.close()

    assert orchestrator.state is FlowState.IDLE
    assert orchestrator.identity is None
    assert orchestrator.spins_remaining is None
    assert session_store.load_session(PHONE, "2024-01-01").spins_used == 0
    assert wallet.balance == 0
    with pytest.raises(InvalidTransitionError):
        orchestrator.settle()


def test_open_should_restart_an_active_flow(orchestrator_factory) -> None:
    orchestrator = _verified(orchestrator_factory)
    assert orchestrator.open() is FlowState.AWAITING_IDENTITY
    assert orchestrator.identity is None
