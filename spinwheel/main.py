from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable

from spinwheel.config.loader import load_wheel_config, resolve_config_path
from spinwheel.config.models import WheelConfig
from spinwheel.core.enums import FlowState
from spinwheel.core.errors import CoreError, SpinsExhaustedError, VerificationFailedError
from spinwheel.core.time_utils import calendar_day, clock_for
from spinwheel.orchestrator import SpinOrchestrator
from spinwheel.session.store import SessionStore
from spinwheel.storage.json_store import JsonFileStore
from spinwheel.telemetry import configure_logging
from spinwheel.telemetry.storage import TelemetryStorage
from spinwheel.verification import StaticCodeVerifier
from spinwheel.wallet import Wallet
from spinwheel.wheel.prize_table import PrizeTable


class ConsolePresentation:
    """Presentation sink that prints the target angle and waits out the animation."""

    def __init__(self, output: Callable[[str], None] = print) -> None:
        self._output = output

    async def animate(self, target_rotation_deg: float, duration_ms: int) -> None:
        self._output(f"Spinning to {target_rotation_deg:.1f} deg ...")
        await asyncio.sleep(duration_ms / 1000)


def build_orchestrator(
    config: WheelConfig,
    project_root: Path,
    logger: logging.Logger,
    notify: Callable[[str], None] | None = None,
) -> SpinOrchestrator:
    backend = JsonFileStore((project_root / config.storage.data_dir).resolve())
    sessions = SessionStore(backend)
    now_fn = clock_for(config.timezone)
    removed = sessions.purge_stale(calendar_day(now_fn(), config.timezone))
    logger.info("Session store ready", extra={"data_dir": str(backend.data_dir), "purged": removed})
    telemetry = TelemetryStorage(
        logs_dir=(project_root / config.telemetry.logs_dir).resolve(),
        reports_dir=(project_root / config.telemetry.reports_dir).resolve(),
    )
    return SpinOrchestrator(
        config,
        PrizeTable.from_config(config.prizes),
        sessions,
        Wallet(backend),
        StaticCodeVerifier(config.verification.code, notify=notify),
        now_fn=now_fn,
        telemetry=telemetry,
    )


async def run_console_flow(
    orchestrator: SpinOrchestrator,
    presentation: ConsolePresentation,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    """Drive one reward flow on the console until spins run out or input ends."""

    orchestrator.open()
    while orchestrator.state is FlowState.AWAITING_IDENTITY:
        try:
            orchestrator.submit_identity(read("Phone number: "))
        except SpinsExhaustedError as exc:
            write(str(exc))
            return
        except CoreError as exc:
            write(str(exc))

    while orchestrator.state is FlowState.AWAITING_VERIFICATION:
        try:
            remaining = orchestrator.submit_verification(read("Verification code: "))
            write(f"Verified. Spins left today: {remaining}")
        except VerificationFailedError as exc:
            write(str(exc))
            if orchestrator.state is FlowState.AWAITING_IDENTITY:
                return
        except SpinsExhaustedError as exc:
            write(str(exc))
            return
        except CoreError as exc:
            write(str(exc))

    while orchestrator.state in (FlowState.ELIGIBLE, FlowState.SPINNING):
        # SPINNING here means the last settlement failed and is still pending.
        retry = orchestrator.state is FlowState.SPINNING
        prompt = "Press enter to retry (q to quit): " if retry else "Press enter to spin (q to quit): "
        if read(prompt).strip().lower() == "q":
            break
        try:
            outcome = orchestrator.settle() if retry else await orchestrator.spin(presentation)
        except CoreError as exc:
            write(str(exc))
            continue
        write(f"You won {outcome.prize.emoji} {outcome.prize.name}: {outcome.prize.amount}!")
        write(f"Wallet balance: {outcome.wallet_balance}. Spins left today: {outcome.spins_remaining}")
    orchestrator.close()


def main() -> None:
    project_root = Path(__file__).resolve().parents[1]
    config_path = resolve_config_path(project_root / "config")
    config = load_wheel_config(config_path)

    log_dir = (project_root / config.telemetry.logs_dir).resolve()
    logger = configure_logging(
        log_dir=log_dir,
        level=config.telemetry.log_level,
        backup_days=config.telemetry.log_backup_days,
        console=False,
    )
    logger.info("Bootstrapping spin wheel", extra={"config_path": str(config_path)})

    orchestrator = build_orchestrator(config, project_root, logger, notify=print)
    try:
        asyncio.run(run_console_flow(orchestrator, ConsolePresentation()))
    except (KeyboardInterrupt, EOFError):  # pragma: no cover - manual exit
        logger.info("Interrupted by user")
    finally:
        orchestrator.close()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - top-level safety
        print(f"Fatal error: {exc}", file=sys.stderr)
        raise
