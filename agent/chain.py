"""
CosmWasm access for the bot, backed by cosmpy.

The rest of the package only depends on the two-method ChainBackend protocol:
  - query_smart(contract, msg)         -> decoded JSON response
  - execute(sender, contract, msg)     -> TransactionReceipt

CosmpyBackend implements it against a live node; tests substitute a fake.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any, Dict, Optional, Protocol

from cosmpy.aerial.client import LedgerClient, NetworkConfig
from cosmpy.aerial.client.utils import prepare_and_broadcast_basic_transaction
from cosmpy.aerial.contract.cosmwasm import create_cosmwasm_execute_msg
from cosmpy.aerial.tx import Transaction, TxFee
from cosmpy.crypto.address import Address
from cosmpy.protos.cosmwasm.wasm.v1.query_pb2 import QuerySmartContractStateRequest

from agent.config import BotConfig
from agent.receipt import TransactionReceipt, TxEvent, events_from_mapping

logger = logging.getLogger(__name__)


class ChainBackend(Protocol):
    def query_smart(self, contract_address: str, msg: Dict[str, Any]) -> Any: ...

    def execute(self, sender: Any, contract_address: str, msg: Dict[str, Any]) -> TransactionReceipt: ...


def network_config(config: BotConfig) -> NetworkConfig:
    # min gas price only matters for cosmpy paths that estimate; executes here pass a fixed TxFee
    return NetworkConfig(
        chain_id=config.chain_id,
        url=config.rpc_url,
        fee_minimum_gas_price=config.gas_price,
        fee_denomination=config.fee_denom,
        staking_denomination=config.fee_denom,
    )


class CosmpyBackend:
    """
    Signed executes carry a fixed TxFee (amount and gas limit precomputed from
    config), so cosmpy never simulates or estimates. wait_timeout_s bounds the
    inclusion wait inside cosmpy itself.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        gas_limit: int,
        fee_amount: str,
        *,
        wait_timeout_s: Optional[float] = None,
    ) -> None:
        self._ledger = ledger
        self.fee = TxFee(amount=fee_amount, gas_limit=gas_limit)
        self.wait_timeout_s = wait_timeout_s

    @classmethod
    def from_config(cls, config: BotConfig) -> "CosmpyBackend":
        ledger = LedgerClient(network_config(config))
        logger.debug("ledger client ready for %s (%s)", config.chain_id, config.rpc_url)
        return cls(ledger, config.gas_limit, config.execute_fee, wait_timeout_s=config.submit_timeout_s)

    def query_smart(self, contract_address: str, msg: Dict[str, Any]) -> Any:
        req = QuerySmartContractStateRequest(
            address=contract_address,
            query_data=json.dumps(msg).encode("utf-8"),
        )
        resp = self._ledger.wasm.SmartContractState(req)
        return json.loads(resp.data)

    def execute(self, sender: Any, contract_address: str, msg: Dict[str, Any]) -> TransactionReceipt:
        tx = Transaction()
        tx.add_message(create_cosmwasm_execute_msg(sender.address(), Address(contract_address), msg))
        submitted = prepare_and_broadcast_basic_transaction(self._ledger, tx, sender, fee=self.fee)
        timeout = timedelta(seconds=self.wait_timeout_s) if self.wait_timeout_s else None
        submitted.wait_to_complete(timeout=timeout)
        return receipt_from_response(submitted.tx_hash, submitted.response)


def receipt_from_response(tx_hash: str, response: Optional[Any]) -> TransactionReceipt:
    """
    Convert a cosmpy TxResponse into a TransactionReceipt.
    Per-message logs are preferred; newer chains leave them empty and only fill
    the flattened top-level events.
    """
    if response is None:
        return TransactionReceipt(tx_hash=tx_hash)

    events: tuple[TxEvent, ...] = ()
    for message_log in getattr(response, "logs", None) or []:
        events += events_from_mapping(getattr(message_log, "events", None) or {})
    if not events:
        events = events_from_mapping(getattr(response, "events", None) or {})

    return TransactionReceipt(
        tx_hash=getattr(response, "hash", None) or tx_hash,
        code=int(getattr(response, "code", 0) or 0),
        events=events,
        height=getattr(response, "height", None),
        gas_used=getattr(response, "gas_used", None),
        raw_log=getattr(response, "raw_log", "") or "",
    )
