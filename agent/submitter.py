"""Signed `response` transactions that write a generated answer back to the contract."""

from __future__ import annotations

import logging
from typing import Any, Dict

from agent.chain import ChainBackend
from agent.contract import TokenId
from agent.deadline import call_with_deadline
from agent.errors import OperationTimeout, SubmissionFailed
from agent.receipt import TransactionReceipt

logger = logging.getLogger(__name__)


def response_msg(token_id: TokenId, output: str) -> Dict[str, Any]:
    return {"response": {"token_id": token_id, "output": output}}


class ResponseSubmitter:
    """
    Broadcasts one response message per call, signed by `sender`.
    The fee is fixed by the backend (gas limit x gas price); nothing is retried
    and no finality check is made beyond the broadcast result.
    """

    def __init__(
        self,
        backend: ChainBackend,
        contract_address: str,
        sender: Any,
        *,
        timeout_s: float = 60.0,
    ) -> None:
        self._backend = backend
        self._sender = sender
        self.contract_address = contract_address
        self.timeout_s = timeout_s

    def submit(self, token_id: TokenId, output: str) -> TransactionReceipt:
        msg = response_msg(token_id, output)
        try:
            receipt = call_with_deadline(
                lambda: self._backend.execute(self._sender, self.contract_address, msg),
                self.timeout_s,
                name="response",
            )
        except OperationTimeout as exc:
            raise SubmissionFailed("response", f"token {token_id}: timed out after {self.timeout_s:g}s") from exc
        except Exception as exc:
            raise SubmissionFailed("response", f"token {token_id}: {type(exc).__name__}: {exc}") from exc

        if not receipt.ok:
            raise SubmissionFailed(
                "response",
                f"token {token_id}: tx {receipt.tx_hash} failed with code {receipt.code}: {receipt.raw_log}",
            )
        return receipt
