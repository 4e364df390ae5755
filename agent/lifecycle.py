"""Process wiring: building the loop from config and exiting on termination signals."""

from __future__ import annotations

import logging
import signal
from typing import Iterable, Optional

from agent.chain import CosmpyBackend
from agent.config import BotConfig
from agent.contract import ContractClient
from agent.poll_loop import PollLoop
from agent.submitter import ResponseSubmitter
from agent.wallet import build_wallet, wallet_address
from inference.client import CompletionClient

logger = logging.getLogger(__name__)


def build_poll_loop(config: BotConfig, wallet=None, backend=None) -> PollLoop:
    """Construct every collaborator from one BotConfig. No network calls happen here."""
    wallet = wallet if wallet is not None else build_wallet(config)
    backend = backend if backend is not None else CosmpyBackend.from_config(config)
    logger.info(
        "bot %s -> contract %s on %s (fee %s)",
        wallet_address(wallet), config.contract_address, config.chain_id, config.execute_fee,
    )
    return PollLoop(
        ContractClient(backend, config.contract_address, timeout_s=config.query_timeout_s),
        CompletionClient.from_config(config),
        ResponseSubmitter(backend, config.contract_address, wallet, timeout_s=config.submit_timeout_s),
        poll_interval_s=config.poll_interval_s,
        id_fetch_policy=config.id_fetch_policy,
    )


def install_signal_handlers(loop: PollLoop, signals: Optional[Iterable[int]] = None) -> None:
    """
    On SIGINT/SIGTERM: log, mark the loop STOPPED, and exit immediately.
    Whatever call is in flight is abandoned.
    """
    targets = list(signals) if signals is not None else [signal.SIGINT, signal.SIGTERM]

    def _handle(signum, _frame):
        name = signal.Signals(signum).name
        logger.info("received %s, shutting down", name)
        loop.stop(f"received {name}")
        raise SystemExit(0)

    for sig in targets:
        signal.signal(sig, _handle)
