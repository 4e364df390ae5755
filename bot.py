"""
NFT answer bot: polls the request contract and writes LLM answers back on-chain.

Usage:
    cp .env.example .env   # RPC_URL, CONTRACT_ADDRESS, MNEMONIC, OPENAI_API_KEY
    python bot.py
    python bot.py --once --log-level DEBUG

Exit codes: 0 stopped cleanly / by signal, 1 loop stopped on a fatal error,
2 configuration incomplete or unusable (nothing was contacted).
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

from agent.config import load_config
from agent.errors import ConfigMissing
from agent.lifecycle import build_poll_loop, install_signal_handlers
from agent.logging_utils import configure_logging
from agent.poll_loop import LoopStatus
from agent.wallet import build_wallet, wallet_info
from server import start_liveness_server


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Answer pending NFT requests with an LLM.")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL (default INFO)")
    parser.add_argument("--once", action="store_true", help="Run a single poll cycle and exit")
    parser.add_argument("--no-server", action="store_true", help="Do not start the liveness listener")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None, env: Optional[Mapping[str, str]] = None) -> int:
    args = parse_args(argv)
    if env is None:
        load_dotenv()
        env = os.environ

    logger = configure_logging(args.log_level or env.get("LOG_LEVEL") or "INFO")

    try:
        config = load_config(env)
    except ConfigMissing as exc:
        logger.error("%s", exc)
        return 2

    try:
        wallet = build_wallet(config)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 2
    loop = build_poll_loop(config, wallet=wallet)

    if not args.no_server:
        start_liveness_server(
            config.app_port,
            public_info={
                "contract": config.contract_address,
                "chain_id": config.chain_id,
                "model":    config.openai_model,
                "wallet":   wallet_info(wallet),
            },
        )
    install_signal_handlers(loop)

    try:
        status = loop.run(max_cycles=1 if args.once else None)
    except Exception as exc:
        logger.exception("bot terminated due to unexpected error: %s", exc)
        return 1

    if loop.fatal:
        logger.error("loop stopped: %s", loop.stop_reason)
        return 1
    logger.info("bot exiting (%s)", status.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
