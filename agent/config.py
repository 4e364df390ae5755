"""
Bot configuration, read once from the environment at startup.

Required:
  - RPC_URL           cosmpy node url, e.g. grpc+https://grpc.mainnet.archway.io:443
                      or rest+https://api.mainnet.archway.io
  - CONTRACT_ADDRESS  bech32 address of the NFT request contract
  - MNEMONIC          signing seed phrase for the bot account (never logged)
  - OPENAI_API_KEY    bearer key for the completion service (never logged)

Optional:
  - CHAIN_ID (archway-1), ADDRESS_PREFIX (archway)
  - FEE_DENOM (aarch), GAS_PRICE (140000000000), GAS_LIMIT (300000)
  - OPENAI_BASE_URL (https://api.openai.com/v1), OPENAI_MODEL (gpt-4o), MAX_TOKENS (150)
  - POLL_INTERVAL_S (5)
  - QUERY_TIMEOUT_S (30), COMPLETION_TIMEOUT_S (15), SUBMIT_TIMEOUT_S (60)
  - ID_FETCH_POLICY (skip | abort)
  - APP_PORT (3327), LOG_LEVEL (INFO)
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from agent.errors import ConfigMissing

logger = logging.getLogger(__name__)

REQUIRED_VARS = ("RPC_URL", "CONTRACT_ADDRESS", "MNEMONIC", "OPENAI_API_KEY")

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


class IdFetchPolicy(str, enum.Enum):
    """What the loop does when the pending-id query fails."""

    SKIP = "skip"    # log, skip this cycle, poll again after the interval
    ABORT = "abort"  # log, stop the loop


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        value = int(env.get(name, str(default)).strip())
    except Exception:
        return default
    return value if value > 0 else default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        value = float(env.get(name, str(default)).strip())
    except Exception:
        return default
    return value if value > 0 else default


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    return (env.get(name) or default).strip()


@dataclass(frozen=True)
class BotConfig:
    rpc_url: str
    contract_address: str
    mnemonic: str = field(repr=False)
    openai_api_key: str = field(repr=False)

    chain_id: str = "archway-1"
    address_prefix: str = "archway"
    fee_denom: str = "aarch"
    gas_price: int = 140_000_000_000
    gas_limit: int = 300_000

    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = "gpt-4o"
    max_tokens: int = 150

    poll_interval_s: float = 5.0
    query_timeout_s: float = 30.0
    completion_timeout_s: float = 15.0
    submit_timeout_s: float = 60.0
    id_fetch_policy: IdFetchPolicy = IdFetchPolicy.SKIP

    app_port: int = 3327
    log_level: str = "INFO"

    @property
    def execute_fee(self) -> str:
        """Fixed fee attached to every response transaction, e.g. '42000000000000000aarch'."""
        return f"{self.gas_limit * self.gas_price}{self.fee_denom}"


def load_config(env: Optional[Mapping[str, str]] = None) -> BotConfig:
    """
    Build a BotConfig from env (defaults to os.environ).
    Raises ConfigMissing naming every absent required variable.
    """
    env = os.environ if env is None else env

    missing = [name for name in REQUIRED_VARS if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigMissing(missing)

    policy_raw = _env_str(env, "ID_FETCH_POLICY", IdFetchPolicy.SKIP.value).lower()
    try:
        policy = IdFetchPolicy(policy_raw)
    except ValueError:
        logger.warning("unknown ID_FETCH_POLICY %r, using %r", policy_raw, IdFetchPolicy.SKIP.value)
        policy = IdFetchPolicy.SKIP

    return BotConfig(
        rpc_url=env["RPC_URL"].strip(),
        contract_address=env["CONTRACT_ADDRESS"].strip(),
        mnemonic=env["MNEMONIC"].strip(),
        openai_api_key=env["OPENAI_API_KEY"].strip(),
        chain_id=_env_str(env, "CHAIN_ID", "archway-1"),
        address_prefix=_env_str(env, "ADDRESS_PREFIX", "archway"),
        fee_denom=_env_str(env, "FEE_DENOM", "aarch"),
        gas_price=_env_int(env, "GAS_PRICE", 140_000_000_000),
        gas_limit=_env_int(env, "GAS_LIMIT", 300_000),
        openai_base_url=_env_str(env, "OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
        openai_model=_env_str(env, "OPENAI_MODEL", "gpt-4o"),
        max_tokens=_env_int(env, "MAX_TOKENS", 150),
        poll_interval_s=_env_float(env, "POLL_INTERVAL_S", 5.0),
        query_timeout_s=_env_float(env, "QUERY_TIMEOUT_S", 30.0),
        completion_timeout_s=_env_float(env, "COMPLETION_TIMEOUT_S", 15.0),
        submit_timeout_s=_env_float(env, "SUBMIT_TIMEOUT_S", 60.0),
        id_fetch_policy=policy,
        app_port=_env_int(env, "APP_PORT", 3327),
        log_level=_env_str(env, "LOG_LEVEL", "INFO").upper(),
    )
